"""AniList GraphQL client: anime metadata and the user's watching list."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from nyaaseek.config import AniListConfig
from nyaaseek.rate_limits import WAIT_LOG_THRESHOLD_SECONDS, enforce_min_interval, normalize_host
from nyaaseek.search.protocols import MetadataSource
from nyaaseek.search.resilience import (
    expect_dict,
    optional_dict,
    optional_list_of_dicts,
    run_with_retries,
)
from nyaaseek.search.types import AiringStatus, AnimeDescriptor, AnimeFormat, MetadataError
from nyaaseek import logger
from nyaaseek.__version__ import __version__

ANILIST_MAX_ATTEMPTS = 3

MEDIA_QUERY = """
query ($id: Int) {
  Media(id: $id, type: ANIME) {
    id
    format
    status
    episodes
    title { romaji english native }
    nextAiringEpisode { episode }
  }
}
"""

WATCHING_QUERY = """
query ($userId: Int) {
  MediaListCollection(userId: $userId, type: ANIME, status_in: [CURRENT]) {
    lists {
      entries {
        progress
        mediaId
        media {
          episodes
          nextAiringEpisode { episode }
          title { romaji english native }
        }
      }
    }
  }
}
"""


@dataclass(frozen=True)
class WatchingEntry:
    media_id: int
    title: str
    progress: int
    episodes: Optional[int]
    next_airing_episode: Optional[int]


def _pick_title(media: dict) -> str:
    titles = optional_dict(media, "title", "Media")
    for key in ("romaji", "english", "native"):
        value = titles.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def _next_airing_episode(media: dict) -> Optional[int]:
    value = optional_dict(media, "nextAiringEpisode", "Media").get("episode")
    return value if isinstance(value, int) else None


def last_airable_episode(media: dict) -> Optional[int]:
    """Newest episode that has aired: one before the next airing, else the total."""
    next_episode = _next_airing_episode(media)
    if next_episode is not None:
        return max(next_episode - 1, 0)
    episodes = media.get("episodes")
    return episodes if isinstance(episodes, int) else None


def build_descriptor(
    media: dict,
    downloaded: Sequence[int] = (),
    progress: Optional[int] = None,
) -> AnimeDescriptor:
    title = _pick_title(media)
    if not title:
        raise MetadataError(f"AniList media {media.get('id')} has no title")
    return AnimeDescriptor(
        title=title,
        format=AnimeFormat.parse(media.get("format")),
        status=AiringStatus.parse(media.get("status")),
        last_airable_episode=last_airable_episode(media),
        downloaded_episodes=frozenset(downloaded),
        progress=progress,
        media_id=media.get("id") if isinstance(media.get("id"), int) else None,
    )


class AniListClient(MetadataSource):
    """Thin async GraphQL client for graphql.anilist.co."""

    def __init__(self, config: AniListConfig, timeout: int = 20):
        self.url = config.url
        self.host = normalize_host(config.url)
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def get_anime(
        self,
        media_id: int,
        downloaded: Sequence[int] = (),
        progress: Optional[int] = None,
    ) -> AnimeDescriptor:
        data = await self.query(MEDIA_QUERY, {"id": media_id})
        media = data.get("Media")
        if not media:
            raise MetadataError(f"AniList has no anime with id {media_id}")
        return build_descriptor(expect_dict(media, "Media"), downloaded, progress)

    async def get_watching_list(self, user_id: int) -> List[WatchingEntry]:
        data = await self.query(WATCHING_QUERY, {"userId": user_id})
        collection = optional_dict(data, "MediaListCollection", "data")
        entries: List[WatchingEntry] = []
        for media_list in optional_list_of_dicts(collection, "lists", "MediaListCollection"):
            for entry in optional_list_of_dicts(media_list, "entries", "lists"):
                media = optional_dict(entry, "media", "entries")
                entries.append(
                    WatchingEntry(
                        media_id=int(entry.get("mediaId") or 0),
                        title=_pick_title(media),
                        progress=int(entry.get("progress") or 0),
                        episodes=media.get("episodes"),
                        next_airing_episode=_next_airing_episode(media),
                    )
                )
        return entries

    async def query(self, query: str, variables: Dict[str, Any]) -> dict:
        """POST a GraphQL query and return its ``data`` object."""
        logger.get_logger().api_request("POST", self.url, variables)
        try:
            status, payload, elapsed_ms = await run_with_retries(
                lambda: self._post({"query": query, "variables": variables}),
                max_attempts=ANILIST_MAX_ATTEMPTS,
                on_retry=lambda attempt, max_attempts, delay, _exc: logger.get_logger().api_retry(
                    self.host, attempt, max_attempts, delay
                ),
            )
        except aiohttp.ClientResponseError as exc:
            raise MetadataError(f"AniList request failed with HTTP {exc.status}") from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.get_logger().api_failed(self.host, ANILIST_MAX_ATTEMPTS)
            raise MetadataError(f"AniList request failed: {str(exc) or type(exc).__name__}") from exc

        logger.get_logger().api_response(status, payload, elapsed_ms)
        root = expect_dict(payload, "AniList payload")
        errors = optional_list_of_dicts(root, "errors", "AniList payload")
        if errors:
            messages = "; ".join(str(error.get("message", "unknown error")) for error in errors)
            raise MetadataError(f"AniList returned errors: {messages}")
        return optional_dict(root, "data", "AniList payload")

    async def _post(self, body: Dict[str, Any]) -> tuple[int, Any, float]:
        request_start = time.time()
        wait = await enforce_min_interval(self.url, min_interval_seconds=0.0)
        if wait > WAIT_LOG_THRESHOLD_SECONDS:
            logger.get_logger().api_wait(self.host, wait)
        session = await self._ensure_session()
        async with session.post(self.url, json=body) as response:
            # GraphQL errors come back with 4xx bodies worth reading.
            if response.status >= 400 and response.status not in {400, 404}:
                text = await response.text()
                raise aiohttp.ClientResponseError(
                    request_info=response.request_info,
                    history=response.history,
                    status=response.status,
                    message=text,
                    headers=response.headers,
                )
            data = await response.json(content_type=None)
            elapsed_ms = (time.time() - request_start) * 1000
            return response.status, data, elapsed_ms

    async def _ensure_session(self) -> aiohttp.ClientSession:
        session = self._session
        if session is not None and not session.closed:
            return session

        async with self._session_lock:
            session = self._session
            if session is None or session.closed:
                self._session = aiohttp.ClientSession(
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/json",
                        "User-Agent": f"nyaaseek/{__version__}",
                    },
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                )
            return self._session

    async def close(self) -> None:
        """Close any open connections."""
        async with self._session_lock:
            session = self._session
            self._session = None
        if session is not None and not session.closed:
            await session.close()
