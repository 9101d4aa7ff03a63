#!/usr/bin/env python3
"""
cli.py - Entry point for nyaaseek
Look up an anime on AniList and find matching releases on the nyaa feed.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

import nyaaseek as pkg
from nyaaseek.anilist import AniListClient
from nyaaseek.config import NyaaseekConfig, load_config
from nyaaseek.search.discovery import DiscoveryEngine, DiscoverySettings
from nyaaseek.search.feed_client import NyaaFeedClient
from nyaaseek.search.formatters import (
    describe_anime,
    emit,
    format_outcome_summary,
    matches_table,
    watching_table,
)
from nyaaseek.search.tokenizer import GuessitTokenizer
from nyaaseek.search.types import DiscoveryOutcome, DiscoveryStatus
from nyaaseek import logger

console = Console()

EXIT_FOUND = 0
EXIT_NOT_FOUND = 2
EXIT_NOT_SEARCHABLE = 3


def _ui_info(message: str) -> None:
    console.print(f"[cyan][INFO][/cyan] {message}")


def _ui_error(message: str) -> None:
    console.print(f"[red][ERROR][/red] {message}")


def parse_episode_list(value: Optional[str]) -> list[int]:
    """Parse ``"1,2,5-7"`` into ``[1, 2, 5, 6, 7]``."""
    if not value:
        return []
    episodes: set[int] = set()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            first, last = (piece.strip() for piece in part.split("-", 1))
            if not first.isdigit() or not last.isdigit():
                raise ValueError(f"Invalid episode range '{part}'")
            episodes.update(range(int(first), int(last) + 1))
        elif part.isdigit():
            episodes.add(int(part))
        else:
            raise ValueError(f"Invalid episode number '{part}'")
    return sorted(episodes)


def exit_code_for(outcome: DiscoveryOutcome) -> int:
    if outcome.status is DiscoveryStatus.FOUND:
        return EXIT_FOUND
    if outcome.status is DiscoveryStatus.NOT_FOUND:
        return EXIT_NOT_FOUND
    return EXIT_NOT_SEARCHABLE


def resolve_config_path(args_config: Optional[str]) -> Optional[Path]:
    if args_config:
        p = Path(args_config).expanduser()
        if p.is_dir():
            p = p / "config.toml"
        return p

    cwd_candidate = Path.cwd() / "config.toml"
    if cwd_candidate.exists():
        return cwd_candidate

    repo_root = Path(__file__).resolve().parent.parent
    root_candidate = repo_root / "config.toml"
    if root_candidate.exists() and (repo_root / "pyproject.toml").exists():
        return root_candidate
    return None


async def run_discovery(
    config: NyaaseekConfig,
    media_id: int,
    downloaded: list[int],
    progress: Optional[int] = None,
) -> DiscoveryOutcome:
    anilist = AniListClient(config.anilist, timeout=config.feed.timeout)
    feed = NyaaFeedClient(config.feed)
    try:
        anime = await anilist.get_anime(media_id, downloaded=downloaded, progress=progress)
        emit(describe_anime(anime))
        engine = DiscoveryEngine(feed, GuessitTokenizer(), DiscoverySettings.from_config(config))
        return await engine.discover(anime)
    finally:
        await anilist.close()
        await feed.close()


async def run_watching(config: NyaaseekConfig, user_id: int) -> None:
    anilist = AniListClient(config.anilist, timeout=config.feed.timeout)
    try:
        entries = await anilist.get_watching_list(user_id)
    finally:
        await anilist.close()
    if not entries:
        emit("You have no anime in your watching list.")
        return
    console.print(watching_table(entries))


def show_help(parser: argparse.ArgumentParser) -> None:
    print(f"NYAASEEK v{getattr(pkg, '__version__', '0.0.0')} - Find releases for the anime you watch")
    print()
    parser.print_help()


def main():
    """Entry point"""
    parser = argparse.ArgumentParser(prog="nyaaseek", add_help=False)
    for args, kwargs in (
        (("-h", "--help"), {"action": "store_true", "help": "Show help"}),
        (("-c", "--config"), {"metavar": "PATH", "help": "Path to config.toml (file or directory)"}),
        (("-d", "--debug"), {"action": "store_true", "help": "Debug mode with requests, responses and rejected releases"}),
        (("--log",), {"metavar": "FILE", "help": "Also write output to FILE"}),
        (("--downloaded",), {"metavar": "LIST", "help": "Episodes already downloaded, e.g. 1,2,5-7"}),
        (("--progress",), {"type": int, "metavar": "N", "help": "Last episode already covered (default: none)"}),
        (("--resolution",), {"metavar": "RES", "help": "Target resolution, overrides config (e.g. 720p)"}),
        (("--watching",), {"nargs": "?", "const": -1, "type": int, "metavar": "USER_ID",
                           "help": "List the CURRENT watching list instead of searching"}),
    ):
        parser.add_argument(*args, **kwargs)
    parser.add_argument('media_id', nargs='?', type=int, help='AniList media id')

    try:
        args = parser.parse_args()
        if args.help or (args.media_id is None and args.watching is None):
            show_help(parser)
            sys.exit(0)

        config_path = resolve_config_path(args.config)
        config = load_config(config_path) if config_path else NyaaseekConfig()
        if args.resolution:
            config.matching.resolution = args.resolution

        log_file = Path(args.log).expanduser() if args.log else None
        with logger.NyaaseekLogger(log_file=log_file, debug=args.debug) as session_logger:
            logger.set_logger(session_logger)

            if args.watching is not None:
                user_id = args.watching if args.watching >= 0 else config.anilist.user_id
                if user_id is None:
                    _ui_error("No AniList user id given and [anilist].user_id is not configured")
                    sys.exit(1)
                asyncio.run(run_watching(config, user_id))
                sys.exit(0)

            downloaded = parse_episode_list(args.downloaded)
            outcome = asyncio.run(run_discovery(config, args.media_id, downloaded, args.progress))
            if outcome.matches:
                console.print(matches_table(outcome))
            emit(format_outcome_summary(outcome))
            sys.exit(exit_code_for(outcome))
    except KeyboardInterrupt:
        _ui_info("Interrupted.")
        sys.exit(0)
    except Exception as e:
        _ui_error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
