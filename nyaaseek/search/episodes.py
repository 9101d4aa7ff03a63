"""Episode bookkeeping: which episodes are still needed and how to spell them."""

from __future__ import annotations

from typing import Iterable, List

WIDE_PADDING_THRESHOLD = 100


def needed_episodes(start: int, downloaded: Iterable[int], end: int) -> List[int]:
    """Return episodes in ``[start, end]`` that are not already downloaded, ascending."""
    if start > end:
        return []
    have = set(downloaded)
    return [episode for episode in range(start, end + 1) if episode not in have]


def episode_width(needed_count: int) -> int:
    # Uploaders pad to the show's length: 3 digits once a run reaches 100 episodes.
    return 3 if needed_count >= WIDE_PADDING_THRESHOLD else 2


def episode_token(episode: int, needed_count: int) -> str:
    return f"{episode:0{episode_width(needed_count)}d}"


def episode_tokens(episodes: List[int]) -> List[str]:
    return [episode_token(episode, len(episodes)) for episode in episodes]


def batch_token(start: int, end: int) -> str:
    return f"{start}-{end}"
