"""Protocol definitions for the collaborators the discovery engine talks to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from nyaaseek.search.types import AnimeDescriptor, CandidateItem, TokenizedTitle


@dataclass(frozen=True)
class FeedQuery:
    text: str
    resolution: str
    category: str
    filter: str

    def describe(self) -> str:
        return f"q='{self.text}', c={self.category}, f={self.filter}, resolution={self.resolution}"


class FeedClient(Protocol):
    """Fetches candidate items; raises FeedTransportError when it cannot."""

    async def fetch(self, query: FeedQuery) -> Sequence[CandidateItem]:
        ...


class TitleTokenizer(Protocol):
    """Splits a raw release title into named fields."""

    def tokenize(self, raw_title: str) -> TokenizedTitle:
        ...


class MetadataSource(Protocol):
    """Looks up anime metadata; raises MetadataError when it cannot."""

    async def get_anime(
        self,
        media_id: int,
        downloaded: Sequence[int] = (),
        progress: int | None = None,
    ) -> AnimeDescriptor:
        ...
