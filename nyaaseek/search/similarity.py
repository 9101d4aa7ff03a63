"""Title similarity scoring."""

from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable

DEFAULT_SIMILARITY_THRESHOLD = 0.8

Scorer = Callable[[str, str], float]


def _bigrams(text: str) -> Counter:
    compact = "".join(text.split())
    return Counter(compact[i:i + 2] for i in range(len(compact) - 1))


def dice_coefficient(first: str, second: str) -> float:
    """Sorensen-Dice coefficient over character bigrams, whitespace ignored.

    1.0 means identical (after whitespace removal), 0.0 means no shared bigram.
    """
    first_compact = "".join(first.split())
    second_compact = "".join(second.split())
    if first_compact == second_compact:
        return 1.0
    if len(first_compact) < 2 or len(second_compact) < 2:
        return 0.0

    first_bigrams = _bigrams(first_compact)
    second_bigrams = _bigrams(second_compact)
    overlap = sum((first_bigrams & second_bigrams).values())
    total = sum(first_bigrams.values()) + sum(second_bigrams.values())
    return 2.0 * overlap / total


def best_rating(reference: str, variants: Iterable[str], scorer: Scorer = dice_coefficient) -> float:
    """Highest rating of ``reference`` against any variant; 0.0 when there are none."""
    return max((scorer(reference, variant) for variant in variants), default=0.0)
