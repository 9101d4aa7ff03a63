"""Release title tokenizer backed by guessit."""

from __future__ import annotations

import re
from typing import Any, Optional

from guessit import guessit
from guessit.api import GuessitException

from nyaaseek.search.types import TokenizedTitle
from nyaaseek import logger

_RELEASE_KEYWORDS = re.compile(r"\b(batch|complete|final|patch|remux)\b", re.IGNORECASE)
_GUESSIT_OPTIONS = {"type": "episode", "episode_prefer_number": True}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def _as_episode(value: Any) -> Optional[str]:
    # A list means a multi-episode release, which has no single episode number.
    if value is None or isinstance(value, (list, tuple)):
        return None
    return str(value)


def _release_information(raw_title: str, other: Any) -> Optional[str]:
    tags = [match.group(1).capitalize() for match in _RELEASE_KEYWORDS.finditer(raw_title)]
    if other:
        tags.extend(str(item) for item in (other if isinstance(other, (list, tuple)) else [other]))
    unique = list(dict.fromkeys(tags))
    return " ".join(unique) or None


def _alternative_titles(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(item) for item in value)
    return (str(value),)


class GuessitTokenizer:
    """TitleTokenizer implementation; unparsable input yields empty fields."""

    def __init__(self, options: Optional[dict] = None) -> None:
        self.options = dict(_GUESSIT_OPTIONS if options is None else options)

    def tokenize(self, raw_title: str) -> TokenizedTitle:
        try:
            guess = guessit(raw_title, self.options)
        except GuessitException as exc:
            logger.debug(f"guessit could not parse '{raw_title}': {exc}")
            return TokenizedTitle(file_name=raw_title)

        return TokenizedTitle(
            file_name=raw_title,
            title=_as_text(guess.get("title")),
            resolution=_as_text(guess.get("screen_size")),
            episode=_as_episode(guess.get("episode")),
            release_information=_release_information(raw_title, guess.get("other")),
            alternative_titles=_alternative_titles(guess.get("alternative_title")),
        )
