"""Retry with exponential backoff for async external calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Throttling and server-side errors; other statuses fail on the first response
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def raise_for_retryable_status(response: httpx.Response) -> httpx.Response:
    """Raise HTTPStatusError only for statuses worth retrying."""
    if response.status_code in RETRYABLE_STATUS_CODES:
        response.raise_for_status()
    return response


def backoff_delay_ms(attempt: int, initial_delay_ms: float) -> float:
    """Delay before retrying after the given 0-indexed attempt failed."""
    return initial_delay_ms * (2 ** attempt)


async def with_retries(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int = 3,
    initial_delay_ms: float = 500.0,
) -> T:
    """Await ``operation()``, retrying on any exception.

    Waits ``initial_delay_ms * 2**attempt`` between tries (no jitter) and
    re-raises the last exception once ``attempts`` tries have failed.
    """
    attempts = max(1, attempts)
    name = getattr(operation, "__name__", repr(operation))

    for attempt in range(attempts):
        try:
            return await operation()
        except Exception as exc:
            if attempt == attempts - 1:
                logger.error("All %d attempts failed for %s: %s", attempts, name, exc)
                raise
            delay_ms = backoff_delay_ms(attempt, initial_delay_ms)
            logger.warning(
                "Attempt %d/%d for %s failed (%s); retrying in %.0fms",
                attempt + 1, attempts, name, exc, delay_ms,
            )
            await asyncio.sleep(delay_ms / 1000.0)

    # Unreachable: the last attempt either returns or re-raises
    raise RuntimeError("Retry loop exited without a result")
