"""Decide which kind of feed query fits an anime's format and airing status."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from nyaaseek.search.episodes import batch_token, episode_tokens, needed_episodes
from nyaaseek.search.types import (
    AiringStatus,
    AnimeDescriptor,
    AnimeFormat,
    SearchMode,
    SearchRequest,
)

SINGLE_RELEASE_FORMATS = frozenset({AnimeFormat.MOVIE, AnimeFormat.OVA, AnimeFormat.ONA, AnimeFormat.TV_SHORT})
EPISODIC_FORMATS = frozenset({AnimeFormat.TV, AnimeFormat.TV_SHORT, AnimeFormat.ONA, AnimeFormat.OVA})


@dataclass(frozen=True)
class SearchPlan:
    mode: SearchMode
    requests: Tuple[SearchRequest, ...]


def episode_window(anime: AnimeDescriptor) -> tuple[int, int]:
    """Return ``(start, end)``: last episode already covered and last airable episode."""
    start = max(anime.progress or 0, 0)
    end = max(anime.last_airable_episode or 0, 0)
    return start, end


def select_search_plan(
    anime: AnimeDescriptor,
    resolution: str,
    start_episode: int,
    end_episode: int,
    downloaded_count: Optional[int] = None,
) -> Optional[SearchPlan]:
    """Map format/status/progress to a search plan, or None when nothing can be searched.

    Rules are checked in order and the first one that applies wins:

    1. finished movie/OVA/ONA/TV short -> one single-release query
    2. finished TV with nothing downloaded yet -> one batch query for ``1-end``
    3. releasing TV/TV short/ONA/OVA -> one query per needed episode
    """
    if downloaded_count is None:
        downloaded_count = len(anime.downloaded_episodes)

    if anime.format in SINGLE_RELEASE_FORMATS and anime.status is AiringStatus.FINISHED:
        request = SearchRequest(title=anime.title, resolution=resolution, mode=SearchMode.SINGLE)
        return SearchPlan(mode=SearchMode.SINGLE, requests=(request,))

    if (
        anime.format is AnimeFormat.TV
        and anime.status is AiringStatus.FINISHED
        and start_episode == 0
        and downloaded_count == 0
    ):
        if end_episode < 1:
            return None
        request = SearchRequest(
            title=anime.title,
            resolution=resolution,
            mode=SearchMode.BATCH,
            episode=batch_token(start_episode + 1, end_episode),
        )
        return SearchPlan(mode=SearchMode.BATCH, requests=(request,))

    if anime.format in EPISODIC_FORMATS and anime.status is AiringStatus.RELEASING:
        episodes = needed_episodes(start_episode + 1, anime.downloaded_episodes, end_episode)
        requests = tuple(
            SearchRequest(title=anime.title, resolution=resolution, mode=SearchMode.EPISODE, episode=token)
            for token in episode_tokens(episodes)
        )
        return SearchPlan(mode=SearchMode.EPISODE, requests=requests)

    return None
