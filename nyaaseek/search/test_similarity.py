from __future__ import annotations

import pytest

from nyaaseek.search.similarity import best_rating, dice_coefficient

TITLE_PAIRS = [
    ("sousou no frieren", "sousou no frieren"),
    ("sousou no frieren", "frieren beyond journey's end"),
    ("one piece", "one-piece"),
    ("kimetsu no yaiba", "kimetsu no yaiba: hashira geiko-hen"),
    ("a", "ab"),
    ("", "bocchi the rock!"),
    ("aaaa", "aa"),
]


@pytest.mark.parametrize(("first", "second"), TITLE_PAIRS)
def test_dice_coefficient_is_symmetric(first: str, second: str) -> None:
    assert dice_coefficient(first, second) == dice_coefficient(second, first)


@pytest.mark.parametrize(("first", "second"), TITLE_PAIRS)
def test_dice_coefficient_stays_in_unit_range(first: str, second: str) -> None:
    assert 0.0 <= dice_coefficient(first, second) <= 1.0


def test_dice_coefficient_exact_match_is_one() -> None:
    assert dice_coefficient("spy x family", "spy x family") == 1.0


def test_dice_coefficient_ignores_whitespace_drift() -> None:
    assert dice_coefficient("spy x family", "spyx  family") == 1.0


def test_dice_coefficient_counts_shared_bigrams() -> None:
    assert dice_coefficient("abcd", "abce") == pytest.approx(4 / 6)


def test_dice_coefficient_unrelated_titles_score_low() -> None:
    assert dice_coefficient("one piece", "bocchi the rock") < 0.3


def test_best_rating_takes_maximum_and_scores_empty_variants() -> None:
    rating = best_rating("sousou no frieren", ["", "frieren", "sousou no frieren "])
    assert rating == 1.0


def test_best_rating_without_variants_is_zero() -> None:
    assert best_rating("anything", []) == 0.0


def test_best_rating_accepts_custom_scorer() -> None:
    calls: list[tuple[str, str]] = []

    def _scorer(first: str, second: str) -> float:
        calls.append((first, second))
        return 0.5

    assert best_rating("x", ["a", "b"], scorer=_scorer) == 0.5
    assert calls == [("x", "a"), ("x", "b")]
