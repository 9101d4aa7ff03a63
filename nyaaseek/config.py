"""
config.py - Configuration model for nyaaseek
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, ValidationError, field_validator
from rich.console import Console
import sys

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

console = Console()


class FeedConfig(BaseModel):
    """Where and how the release feed is queried."""

    base_url: str = "https://nyaa.si/"
    category: str = Field(
        default="1_2",
        description="Feed category filter (1_2 = Anime - English-translated)"
    )
    filter: str = Field(
        default="0",
        description="Feed quality filter (0 = no filter, 1 = no remakes, 2 = trusted only)"
    )
    timeout: int = 20
    max_concurrency: int = 3
    min_interval_seconds: float = Field(
        default=1.0,
        description="Minimum spacing between requests to the same feed host"
    )


class MatchingConfig(BaseModel):
    """Parameters that control release title matching."""

    resolution: str = "1080p"
    similarity_threshold: float = Field(
        default=0.8,
        description="Minimum title similarity (0-1) for a release to be considered"
    )

    @field_validator("similarity_threshold")
    @classmethod
    def _threshold_in_range(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("similarity_threshold must be between 0 and 1")
        return value


class AniListConfig(BaseModel):
    url: str = "https://graphql.anilist.co"
    user_id: Optional[int] = None


class NyaaseekConfig(BaseModel):
    feed: FeedConfig = Field(default_factory=FeedConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    anilist: AniListConfig = Field(default_factory=AniListConfig)
    config_path: Optional[Path] = None


def load_config(config_path: Path) -> NyaaseekConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        console.print(f"[red][ERROR][/red] Configuration file not found: {config_path}")
        console.print("Create config.toml or run without --config to use the defaults")
        sys.exit(1)

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)

        return NyaaseekConfig(
            feed=FeedConfig(**config_data.get("feed", {})),
            matching=MatchingConfig(**config_data.get("matching", {})),
            anilist=AniListConfig(**config_data.get("anilist", {})),
            config_path=config_path,
        )

    except (OSError, tomllib.TOMLDecodeError, ValidationError, TypeError) as e:
        console.print(f"[red][ERROR][/red] Error loading configuration: {e}")
        sys.exit(1)
