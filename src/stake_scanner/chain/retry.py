"""Bounded retry with linear backoff for contract reads."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


async def retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int,
    base_delay: float,
    *,
    description: str | None = None,
) -> T:
    """Run ``operation`` until it succeeds or ``max_attempts`` retries are used.

    The first call is not a retry, so an operation that always fails is
    invoked ``max_attempts + 1`` times. Before retry ``n`` (1-based) the
    coroutine sleeps ``base_delay * n`` seconds. The last error is re-raised.
    """
    if max_attempts < 0:
        raise ValueError(f"max_attempts must be >= 0, got {max_attempts}")
    what = description or getattr(operation, "__name__", "operation")
    for attempt in range(max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt >= max_attempts:
                raise
            delay = base_delay * (attempt + 1)
            log.warning(
                "%s failed (retry %d/%d in %.1fs): %s",
                what, attempt + 1, max_attempts, delay, exc,
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
