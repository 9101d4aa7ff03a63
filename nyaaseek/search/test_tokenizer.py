from __future__ import annotations

import pytest

from nyaaseek.search import tokenizer
from nyaaseek.search.tokenizer import GuessitTokenizer


def test_tokenize_typical_episode_release() -> None:
    raw = "[SubsPlease] Sousou no Frieren - 05 (1080p) [F02B9CEE].mkv"

    tokens = GuessitTokenizer().tokenize(raw)

    assert tokens.file_name == raw
    assert tokens.title == "Sousou no Frieren"
    assert tokens.resolution == "1080p"
    assert int(tokens.episode) == 5


def test_tokenize_reports_release_keywords() -> None:
    tokens = GuessitTokenizer().tokenize("[Judas] Sousou no Frieren (Batch) [1080p]")

    assert tokens.release_information is not None
    assert "Batch" in tokens.release_information


def test_tokenize_uses_fake_guess_fields(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        tokenizer,
        "guessit",
        lambda _raw, _options: {
            "title": "Show",
            "screen_size": "720p",
            "episode": [1, 2, 3],
            "other": ["Complete", "Rip"],
            "alternative_title": "Alt Name",
        },
    )

    tokens = GuessitTokenizer().tokenize("[G] Show 01-03 [720p] Complete")

    assert tokens.title == "Show"
    assert tokens.resolution == "720p"
    assert tokens.episode is None
    assert tokens.release_information == "Complete Rip"
    assert tokens.alternative_titles == ("Alt Name",)


def test_tokenize_returns_empty_fields_when_guessit_fails(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(raw, options):
        raise tokenizer.GuessitException(raw, options)

    monkeypatch.setattr(tokenizer, "guessit", _boom)

    tokens = GuessitTokenizer().tokenize("garbage")

    assert tokens.file_name == "garbage"
    assert tokens.title == ""
    assert tokens.resolution == ""
