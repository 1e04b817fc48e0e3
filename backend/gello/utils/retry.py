"""Retry helper for tooling scripts.

Request handlers never retry; a data-service failure there is surfaced to the
caller. Scripts that provision data in bulk use ``retry_with_backoff`` to ride
out transient network errors.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
import structlog

from gello.exceptions import DataServiceError

logger = structlog.get_logger()

T = TypeVar("T")

MAX_RETRIES = 3
INITIAL_DELAY = 0.1  # seconds
MAX_DELAY = 5.0
JITTER_MIN = 0.5
JITTER_MAX = 1.5

_TRANSIENT_MARKERS = ("connection", "timeout", "timed out", "network", "unavailable", "reset")


def is_retryable_error(exc: BaseException) -> bool:
    """True for transient transport failures, False for business errors."""
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError)):
        return True
    # An error code from the service is a definite answer, not a transient failure.
    if isinstance(exc, DataServiceError) and not exc.service_code:
        message = exc.message.lower()
        return any(marker in message for marker in _TRANSIENT_MARKERS)
    return False


def backoff_delay(attempt: int, initial_delay: float = INITIAL_DELAY) -> float:
    """Capped exponential delay for ``attempt`` (0-based) with jitter applied."""
    capped = min(MAX_DELAY, initial_delay * (2**attempt))
    return capped * random.uniform(JITTER_MIN, JITTER_MAX)


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = MAX_RETRIES,
    initial_delay: float = INITIAL_DELAY,
) -> T:
    """Await ``fn()`` up to ``max_retries`` times, sleeping between transient failures.

    Non-transient errors and the last failure are re-raised unchanged.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")
    for attempt in range(max_retries):
        try:
            return await fn()
        except Exception as exc:
            if attempt >= max_retries - 1 or not is_retryable_error(exc):
                raise
            delay = backoff_delay(attempt, initial_delay)
            logger.warning("retrying_after_error", attempt=attempt + 1, delay=round(delay, 3), error=str(exc))
            await asyncio.sleep(delay)
    raise RuntimeError("unreachable")
