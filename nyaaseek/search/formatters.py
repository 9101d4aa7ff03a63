from __future__ import annotations

from typing import Sequence

from rich.table import Table
from rich.text import Text

from nyaaseek.anilist import WatchingEntry
from nyaaseek.search.types import AnimeDescriptor, DiscoveryOutcome, DiscoveryStatus
from nyaaseek import logger


def emit(message: str, indent: int = 0) -> None:
    """Emit message to screen and log file via logger."""
    padding = " " * max(indent, 0)
    plain = Text.from_markup(message).plain
    logger.log(f"{padding}{plain}")


def describe_anime(anime: AnimeDescriptor) -> str:
    aired = "?" if anime.last_airable_episode is None else str(anime.last_airable_episode)
    downloaded = len(anime.downloaded_episodes)
    return (
        f"{anime.title} [{anime.format.value}, {anime.status.value}] "
        f"aired={aired} progress={anime.progress or 0} downloaded={downloaded}"
    )


def format_outcome_summary(outcome: DiscoveryOutcome) -> str:
    if outcome.status is DiscoveryStatus.NOT_SEARCHABLE:
        return "Not searchable: no search mode fits this format and airing status."
    mode = outcome.mode.value if outcome.mode else "?"
    if outcome.status is DiscoveryStatus.NOT_FOUND:
        summary = f"Nothing found ({mode} search)."
    else:
        summary = f"Found {len(outcome.matches)} release(s) ({mode} search)."
    if outcome.failed_queries:
        summary += f" Could not search: {', '.join(outcome.failed_queries)}."
    return summary


def matches_table(outcome: DiscoveryOutcome) -> Table:
    table = Table(title="Matched releases")
    table.add_column("Episode", justify="right")
    table.add_column("Seeders", justify="right")
    table.add_column("Release")
    table.add_column("Link", overflow="fold")
    for match in outcome.matches:
        table.add_row(
            match.episode,
            str(match.candidate.seeders),
            Text(match.candidate.title),
            Text(match.candidate.link),
        )
    return table


def watching_table(entries: Sequence[WatchingEntry]) -> Table:
    table = Table(title="Currently watching")
    table.add_column("Media ID", justify="right")
    table.add_column("Title")
    table.add_column("Progress", justify="right")
    table.add_column("Episodes", justify="right")
    for entry in entries:
        table.add_row(
            str(entry.media_id),
            Text(entry.title),
            str(entry.progress),
            "?" if entry.episodes is None else str(entry.episodes),
        )
    return table
