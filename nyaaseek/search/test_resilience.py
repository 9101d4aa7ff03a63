from __future__ import annotations

import asyncio

import pytest

from nyaaseek.search import resilience
from nyaaseek.search.resilience import (
    expect_dict,
    is_retryable_exception,
    optional_dict,
    optional_list_of_dicts,
    retry_delay_seconds,
    run_with_retries,
)


def test_expect_dict_rejects_other_types() -> None:
    assert expect_dict({"a": 1}, "payload") == {"a": 1}
    with pytest.raises(ValueError, match="payload has unexpected type 'list'"):
        expect_dict([], "payload")


def test_optional_helpers_treat_none_as_empty() -> None:
    assert optional_dict({"data": None}, "data", "root") == {}
    assert optional_list_of_dicts({"errors": None}, "errors", "root") == []


def test_optional_list_of_dicts_validates_items() -> None:
    with pytest.raises(ValueError, match=r"root.errors\[1\]"):
        optional_list_of_dicts({"errors": [{}, "oops"]}, "errors", "root")


def test_retry_delay_prefers_retry_after_header() -> None:
    assert retry_delay_seconds(attempt=1, retry_after="7") == 7
    assert retry_delay_seconds(attempt=2, retry_after="soon") == 4
    assert retry_delay_seconds(attempt=3) == 8


def test_timeouts_are_retryable_but_value_errors_are_not() -> None:
    assert is_retryable_exception(asyncio.TimeoutError())
    assert not is_retryable_exception(ValueError("bad payload"))


@pytest.mark.asyncio
async def test_run_with_retries_retries_transient_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    delays: list[float] = []
    retries: list[tuple[int, int, int]] = []
    attempts = {"count": 0}

    async def _fake_sleep(delay: float) -> None:
        delays.append(delay)

    async def _operation() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise asyncio.TimeoutError()
        return "ok"

    monkeypatch.setattr(resilience.asyncio, "sleep", _fake_sleep)

    result = await run_with_retries(
        _operation,
        max_attempts=3,
        on_retry=lambda attempt, max_attempts, delay, _exc: retries.append((attempt, max_attempts, delay)),
    )

    assert result == "ok"
    assert delays == [2, 4]
    assert retries == [(1, 3, 2), (2, 3, 4)]


@pytest.mark.asyncio
async def test_run_with_retries_raises_non_retryable_immediately() -> None:
    attempts = {"count": 0}

    async def _operation() -> None:
        attempts["count"] += 1
        raise ValueError("broken")

    with pytest.raises(ValueError, match="broken"):
        await run_with_retries(_operation, max_attempts=3)

    assert attempts["count"] == 1
