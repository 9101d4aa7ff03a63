"""Shared resilience helpers for transient HTTP failures and payload guards."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from aiohttp import ClientConnectionError, ClientResponseError, ServerTimeoutError

RETRYABLE_HTTP_STATUSES = {429, 500, 502, 503, 504}

_T = TypeVar("_T")


def expect_dict(value: object, context: str) -> dict:
    if isinstance(value, dict):
        return value
    value_type = type(value).__name__
    raise ValueError(f"{context} has unexpected type '{value_type}'")


def optional_dict(container: dict, key: str, context: str) -> dict:
    value = container.get(key, {})
    if value is None:
        return {}
    return expect_dict(value, f"{context}.{key}")


def optional_list_of_dicts(container: dict, key: str, context: str) -> list[dict]:
    values = container.get(key, [])
    if values is None:
        return []
    if not isinstance(values, list):
        value_type = type(values).__name__
        raise ValueError(f"{context}.{key} has unexpected type '{value_type}'")
    return [expect_dict(value, f"{context}.{key}[{idx}]") for idx, value in enumerate(values)]


def is_retryable_exception(exc: Exception) -> bool:
    return (
        isinstance(exc, (asyncio.TimeoutError, ClientConnectionError, ServerTimeoutError))
        or (isinstance(exc, ClientResponseError) and exc.status in RETRYABLE_HTTP_STATUSES)
    )


def retry_delay_seconds(*, attempt: int, retry_after: str | None = None) -> int:
    if retry_after:
        try:
            value = int(float(retry_after))
        except (TypeError, ValueError):
            value = 0
        if value > 0:
            return value
    return 2 ** attempt


async def run_with_retries(
    operation: Callable[[], Awaitable[_T]],
    *,
    max_attempts: int,
    on_retry: Callable[[int, int, int, Exception], None] | None = None,
) -> _T:
    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts or not is_retryable_exception(exc):
                raise
            retry_after = exc.headers.get("Retry-After") if isinstance(exc, ClientResponseError) and exc.headers else None
            delay = retry_delay_seconds(attempt=attempt, retry_after=retry_after)
            if on_retry is not None:
                on_retry(attempt, max_attempts, delay, exc)
            await asyncio.sleep(delay)
    raise RuntimeError("Unreachable retry exit")
