"""Turn tokenized release titles into comparable fields."""

from __future__ import annotations

import re
from typing import List, Optional

from nyaaseek.search.types import EpisodeRange, ParsedTitle, TokenizedTitle

_PARENTHESIZED = re.compile(r"\((.+?)\)")
_EPISODE_RANGE = re.compile(r"(\d+)\s*[-~]\s*(\d+)")


def title_variants(title: str, alternatives: tuple[str, ...] = ()) -> tuple[str, ...]:
    """Lower-cased title variants a reference title is compared against.

    The list always holds the full title, the title without its first
    parenthesized segment, that segment (empty when absent) and every
    ``|``-separated alias.
    """
    sub_title_match = _PARENTHESIZED.search(title)
    sub_title = sub_title_match.group(1) if sub_title_match else ""
    main_title = _PARENTHESIZED.sub("", title, count=1)

    variants: List[str] = [title, main_title, sub_title]
    variants.extend(title.split("|"))
    variants.extend(alternatives)
    return tuple(variant.strip().lower() for variant in variants)


def interpret_title(tokens: TokenizedTitle) -> Optional[ParsedTitle]:
    """Build a ParsedTitle, or None when the tokenizer found no title or resolution."""
    if not tokens.title or not tokens.resolution:
        return None
    return ParsedTitle(
        file_name=tokens.file_name,
        title=tokens.title,
        variants=title_variants(tokens.title, tokens.alternative_titles),
        resolution=tokens.resolution,
        episode=tokens.episode or None,
        release_information=tokens.release_information or None,
    )


def parse_episode_range(text: str) -> Optional[EpisodeRange]:
    """Find the first ``A-B`` or ``A~B`` numeric range in ``text``."""
    match = _EPISODE_RANGE.search(text or "")
    if not match:
        return None
    return EpisodeRange(start=int(match.group(1)), end=int(match.group(2)))


def as_episode_number(value: Optional[str]) -> Optional[int]:
    """Leading integer of an episode token (``"05"`` -> 5, ``"05v2"`` -> 5)."""
    if value is None:
        return None
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else None
