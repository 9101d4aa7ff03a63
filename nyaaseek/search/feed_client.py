"""nyaa RSS feed client: query the feed and turn entries into candidates."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List

import aiohttp
import feedparser

from nyaaseek.config import FeedConfig
from nyaaseek.rate_limits import WAIT_LOG_THRESHOLD_SECONDS, enforce_min_interval, normalize_host
from nyaaseek.search.protocols import FeedClient, FeedQuery
from nyaaseek.search.resilience import run_with_retries
from nyaaseek.search.types import CandidateItem, FeedTransportError
from nyaaseek import logger
from nyaaseek.__version__ import __version__

DEFAULT_USER_AGENT = f"nyaaseek/{__version__}"
FEED_FETCH_MAX_ATTEMPTS = 3


def as_seeders(value: object) -> int:
    """Seeder count from a feed field; anything non-numeric counts as unseeded."""
    try:
        return max(int(str(value).strip()), 0)
    except (TypeError, ValueError):
        return 0


def entry_to_candidate(entry: Dict[str, Any]) -> CandidateItem:
    return CandidateItem(
        title=str(entry.get("title", "")),
        seeders=as_seeders(entry.get("nyaa_seeders")),
        link=str(entry.get("link", "")),
        published=entry.get("published"),
        info_hash=entry.get("nyaa_infohash"),
        size=entry.get("nyaa_size"),
        extra={"guid": entry.get("id"), "category": entry.get("nyaa_category")},
    )


class NyaaFeedClient(FeedClient):
    """Fetches nyaa search results through the RSS view."""

    def __init__(self, config: FeedConfig):
        self.config = config
        self.base_url = config.base_url.rstrip("/") + "/"
        self.host = normalize_host(config.base_url)
        self._semaphore = asyncio.Semaphore(max(1, config.max_concurrency))
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def fetch(self, query: FeedQuery) -> List[CandidateItem]:
        params = {"page": "rss", "q": query.text, "c": query.category, "f": query.filter}
        logger.get_logger().api_request("GET", self.base_url, params)

        try:
            status, body, elapsed_ms = await run_with_retries(
                lambda: self._get(params),
                max_attempts=FEED_FETCH_MAX_ATTEMPTS,
                on_retry=lambda attempt, max_attempts, delay, _exc: logger.get_logger().api_retry(
                    self.host, attempt, max_attempts, delay
                ),
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.get_logger().api_failed(self.host, FEED_FETCH_MAX_ATTEMPTS)
            raise FeedTransportError(query.text, f"feed request failed: {str(exc) or type(exc).__name__}") from exc

        logger.get_logger().api_response(status, body.decode("utf-8", errors="replace"), elapsed_ms)
        # feedparser sniffs the encoding from the raw bytes and flags overrides as bozo.
        try:
            feed = feedparser.parse(body)
        except (ValueError, LookupError) as exc:
            raise FeedTransportError(query.text, f"unreadable feed: {exc}") from exc
        if feed.bozo and not feed.entries:
            raise FeedTransportError(query.text, f"malformed feed: {feed.get('bozo_exception')}")
        return [entry_to_candidate(entry) for entry in feed.entries]

    async def _get(self, params: Dict[str, str]) -> tuple[int, bytes, float]:
        request_start = time.time()
        async with self._semaphore:
            await self._enforce_interval()
            session = await self._ensure_session()
            async with session.get(self.base_url, params=params) as response:
                if response.status >= 400:
                    text = (await response.read()).decode("utf-8", errors="replace")
                    raise aiohttp.ClientResponseError(
                        request_info=response.request_info,
                        history=response.history,
                        status=response.status,
                        message=text,
                        headers=response.headers,
                    )
                body = await response.read()
                elapsed_ms = (time.time() - request_start) * 1000
                return response.status, body, elapsed_ms

    async def _enforce_interval(self) -> None:
        wait = await enforce_min_interval(self.base_url, min_interval_seconds=self.config.min_interval_seconds)
        log = logger.get_logger()
        log.api_wait_debug(self.host, wait)
        if wait > WAIT_LOG_THRESHOLD_SECONDS:
            log.api_wait(self.host, wait)

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                self._session = aiohttp.ClientSession(
                    headers={"User-Agent": DEFAULT_USER_AGENT},
                    timeout=timeout,
                )
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
