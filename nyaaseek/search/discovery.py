"""Discovery run: pick the search shape, query the feed, keep the first acceptable release."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from nyaaseek.config import NyaaseekConfig
from nyaaseek.search.match_verifier import verify_candidate
from nyaaseek.search.protocols import FeedClient, FeedQuery, TitleTokenizer
from nyaaseek.search.search_mode import episode_window, select_search_plan
from nyaaseek.search.similarity import DEFAULT_SIMILARITY_THRESHOLD, Scorer, dice_coefficient
from nyaaseek.search.title_parser import interpret_title
from nyaaseek.search.types import (
    AnimeDescriptor,
    CandidateItem,
    DiscoveryOutcome,
    FeedTransportError,
    MatchedRelease,
    SearchRequest,
)
from nyaaseek import logger


@dataclass(frozen=True)
class DiscoverySettings:
    resolution: str = "1080p"
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    category: str = "1_2"
    filter: str = "0"
    scorer: Scorer = field(default=dice_coefficient, compare=False)

    @classmethod
    def from_config(cls, config: NyaaseekConfig) -> "DiscoverySettings":
        return cls(
            resolution=config.matching.resolution,
            similarity_threshold=config.matching.similarity_threshold,
            category=config.feed.category,
            filter=config.feed.filter,
        )


def rank_candidates(items: Iterable[CandidateItem]) -> List[CandidateItem]:
    """Seeded candidates, most seeders first; ties keep feed order."""
    return sorted((item for item in items if item.seeders > 0), key=lambda item: item.seeders, reverse=True)


@dataclass(frozen=True)
class _QueryResult:
    request: SearchRequest
    match: Optional[MatchedRelease] = None
    failed: bool = False


class DiscoveryEngine:
    """Runs one discovery call per anime against a feed client."""

    def __init__(
        self,
        feed_client: FeedClient,
        tokenizer: TitleTokenizer,
        settings: Optional[DiscoverySettings] = None,
    ) -> None:
        self.feed_client = feed_client
        self.tokenizer = tokenizer
        self.settings = settings or DiscoverySettings()

    async def discover(
        self,
        anime: AnimeDescriptor,
        start_episode: Optional[int] = None,
        end_episode: Optional[int] = None,
    ) -> DiscoveryOutcome:
        default_start, default_end = episode_window(anime)
        start = default_start if start_episode is None else start_episode
        end = default_end if end_episode is None else end_episode

        plan = select_search_plan(anime, self.settings.resolution, start, end)
        if plan is None:
            logger.debug(
                f"'{anime.title}' ({anime.format.value}, {anime.status.value}) has no applicable search mode"
            )
            return DiscoveryOutcome.not_searchable()

        logger.debug(f"'{anime.title}': {plan.mode.value} search, {len(plan.requests)} quer(y/ies)")
        # Queries are independent; one failing never cancels the others.
        results = await asyncio.gather(*(self._run_query(request) for request in plan.requests))

        matches = tuple(result.match for result in results if result.match is not None)
        failed = tuple(result.request.episode or result.request.query_text() for result in results if result.failed)
        return DiscoveryOutcome.from_matches(plan.mode, matches, failed)

    def build_query(self, request: SearchRequest) -> FeedQuery:
        return FeedQuery(
            text=request.query_text(),
            resolution=request.resolution,
            category=self.settings.category,
            filter=self.settings.filter,
        )

    async def _run_query(self, request: SearchRequest) -> _QueryResult:
        query = self.build_query(request)
        logger.debug(f"Searching feed: {query.describe()}")
        try:
            items = await self.feed_client.fetch(query)
        except FeedTransportError as exc:
            logger.warning(f"Could not search for {request.describe()}: {exc}")
            return _QueryResult(request=request, failed=True)

        match = self.select_candidate(request, items)
        if match is None:
            logger.debug(f"No acceptable release among {len(items)} result(s) for {request.describe()}")
        else:
            logger.info(
                f"Matched {match.download_name}: '{match.candidate.title}' ({match.candidate.seeders} seeders)"
            )
        return _QueryResult(request=request, match=match)

    def select_candidate(self, request: SearchRequest, items: Sequence[CandidateItem]) -> Optional[MatchedRelease]:
        """First ranked candidate that passes verification, or None."""
        for item in rank_candidates(items):
            parsed = interpret_title(self.tokenizer.tokenize(item.title))
            if parsed is None:
                logger.debug(f"  skip '{item.title}': title or resolution not recognised")
                continue
            result = verify_candidate(
                request,
                parsed,
                threshold=self.settings.similarity_threshold,
                scorer=self.settings.scorer,
            )
            if result.passed:
                return MatchedRelease(
                    candidate=item,
                    episode=result.episode or "",
                    mode=request.mode,
                    title=request.title,
                )
            logger.debug(f"  skip '{item.title}': {result.reason}")
        return None
