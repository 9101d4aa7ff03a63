"""Shared data structures for discovery and matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple


class AnimeFormat(str, Enum):
    MOVIE = "MOVIE"
    OVA = "OVA"
    ONA = "ONA"
    TV = "TV"
    TV_SHORT = "TV_SHORT"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: object) -> "AnimeFormat":
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.UNKNOWN


class AiringStatus(str, Enum):
    FINISHED = "FINISHED"
    RELEASING = "RELEASING"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: object) -> "AiringStatus":
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.OTHER


class SearchMode(str, Enum):
    SINGLE = "SINGLE"
    BATCH = "BATCH"
    EPISODE = "EPISODE"


@dataclass(frozen=True)
class AnimeDescriptor:
    """Snapshot of the metadata needed to decide what to search for."""

    title: str
    format: AnimeFormat
    status: AiringStatus
    last_airable_episode: Optional[int] = None
    downloaded_episodes: FrozenSet[int] = frozenset()
    progress: Optional[int] = None
    media_id: Optional[int] = None


@dataclass(frozen=True)
class SearchRequest:
    title: str
    resolution: str
    mode: SearchMode
    episode: Optional[str] = None

    def query_text(self) -> str:
        if self.mode is SearchMode.EPISODE and self.episode:
            return f"{self.title} - {self.episode}"
        return self.title

    def describe(self) -> str:
        items = [f"title='{self.title}'", f"mode={self.mode.value}", f"resolution={self.resolution}"]
        if self.episode:
            items.append(f"episode={self.episode}")
        return ", ".join(items)


@dataclass(frozen=True)
class CandidateItem:
    """One feed entry; ``link`` and ``published`` are only carried through."""

    title: str
    seeders: int
    link: str = ""
    published: Optional[str] = None
    info_hash: Optional[str] = None
    size: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class TokenizedTitle:
    """Fields produced by a title tokenizer for one raw release title."""

    file_name: str = ""
    title: str = ""
    resolution: str = ""
    episode: Optional[str] = None
    release_information: Optional[str] = None
    alternative_titles: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParsedTitle:
    file_name: str
    title: str
    variants: Tuple[str, ...]
    resolution: str
    episode: Optional[str] = None
    release_information: Optional[str] = None


@dataclass(frozen=True)
class EpisodeRange:
    start: int
    end: int


@dataclass(frozen=True)
class MatchResult:
    passed: bool
    episode: Optional[str] = None
    reason: str = ""

    @classmethod
    def fail(cls, reason: str) -> "MatchResult":
        return cls(passed=False, reason=reason)


@dataclass(frozen=True)
class MatchedRelease:
    """Accepted candidate annotated with the episode token used for naming."""

    candidate: CandidateItem
    episode: str
    mode: SearchMode
    title: str

    @property
    def download_name(self) -> str:
        if self.mode is SearchMode.SINGLE:
            return self.title
        return f"{self.title} - {self.episode}"


class DiscoveryStatus(str, Enum):
    NOT_SEARCHABLE = "NOT_SEARCHABLE"
    NOT_FOUND = "NOT_FOUND"
    FOUND = "FOUND"


@dataclass(frozen=True)
class DiscoveryOutcome:
    status: DiscoveryStatus
    mode: Optional[SearchMode] = None
    matches: Tuple[MatchedRelease, ...] = ()
    failed_queries: Tuple[str, ...] = ()

    @classmethod
    def not_searchable(cls) -> "DiscoveryOutcome":
        return cls(status=DiscoveryStatus.NOT_SEARCHABLE)

    @classmethod
    def from_matches(
        cls,
        mode: SearchMode,
        matches: Tuple[MatchedRelease, ...],
        failed_queries: Tuple[str, ...] = (),
    ) -> "DiscoveryOutcome":
        status = DiscoveryStatus.FOUND if matches else DiscoveryStatus.NOT_FOUND
        return cls(status=status, mode=mode, matches=matches, failed_queries=failed_queries)

    @property
    def searchable(self) -> bool:
        return self.status is not DiscoveryStatus.NOT_SEARCHABLE

    @property
    def found(self) -> bool:
        return self.status is DiscoveryStatus.FOUND


class FeedTransportError(RuntimeError):
    """Feed could not be fetched or parsed; distinct from an empty result."""

    def __init__(self, query: str, message: str) -> None:
        super().__init__(f"{message} (query '{query}')")
        self.query = query


class MetadataError(RuntimeError):
    """Metadata source failed to return a usable descriptor."""
