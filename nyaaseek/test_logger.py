from __future__ import annotations

from rich.text import Text

import nyaaseek.logger as ns_logger


def test_api_wait_debug_drops_when_debug_disabled(monkeypatch):
    log = ns_logger.NyaaseekLogger(debug=False)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait_debug("nyaa.si", 0.321)

    assert captured == []


def test_api_wait_debug_emits_when_debug_enabled(monkeypatch):
    log = ns_logger.NyaaseekLogger(debug=True)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait_debug("nyaa.si", 1.234)

    assert len(captured) == 1
    prefix, msg = captured[0]
    assert "[DEBUG]" in prefix
    assert "1.234s" in msg
    assert "nyaa.si" in msg


def test_api_wait_logs_one_time_note_per_host(monkeypatch):
    log = ns_logger.NyaaseekLogger(debug=False)
    captured: list[tuple[str, str]] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append((prefix, msg)))

    log.api_wait("nyaa.si", 1.8)
    log.api_wait("NYAA.si", 2.2)
    log.api_wait("graphql.anilist.co", 2.0)

    assert captured == [
        ("[INFO] ", "Request pacing active for nyaa.si; queries are spaced out."),
        ("[INFO] ", "Request pacing active for graphql.anilist.co; queries are spaced out."),
    ]


def test_api_response_truncates_large_payloads(monkeypatch):
    log = ns_logger.NyaaseekLogger(debug=True)
    captured: list[str] = []
    monkeypatch.setattr(log, "log", lambda msg, prefix="": captured.append(msg))

    log.api_response(200, "x" * (ns_logger.MAX_LOGGED_PAYLOAD_CHARS + 50), 12.0)

    assert captured[0] == "API Response (12ms): Status 200"
    assert captured[1].endswith("... (truncated)")


def test_screen_text_styles_prefixes_and_keeps_brackets_literal(monkeypatch):
    log = ns_logger.NyaaseekLogger(debug=False)
    monkeypatch.setattr(log._console, "print", lambda *_args, **_kwargs: None)

    warning = log._screen_text("[WARNING] Could not search for [Group] Show - 03")

    assert isinstance(warning, Text)
    assert warning.plain == "[WARNING] Could not search for [Group] Show - 03"
    assert any(span.style == "yellow" for span in warning.spans)


def test_log_writes_plain_text_to_file(tmp_path, monkeypatch):
    out = tmp_path / "nyaaseek.log"
    log = ns_logger.NyaaseekLogger(log_file=out, debug=False)
    monkeypatch.setattr(log._console, "print", lambda *_args, **_kwargs: None)

    log.warning("[SubsPlease] literal bracketed message")
    log.close()

    text = out.read_text(encoding="utf-8")
    assert "[WARNING] [SubsPlease] literal bracketed message" in text
    assert "Ended session" in text


def test_get_logger_falls_back_to_stdout_logger(monkeypatch):
    monkeypatch.setattr(ns_logger, "_logger", None)

    first = ns_logger.get_logger()

    assert isinstance(first, ns_logger.NyaaseekLogger)
    assert ns_logger.get_logger() is first
