"""
Retry with exponential backoff for async upstream calls
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """How many times to call an operation and the first backoff delay"""
    max_attempts: int = 3
    base_delay_ms: int = 500


# Caller policies for the provider fetches
SUB_RETRY = RetryPolicy(max_attempts=3, base_delay_ms=1000)
DUB_RETRY = RetryPolicy(max_attempts=2, base_delay_ms=500)
MULTI_SERVER_RETRY = RetryPolicy(max_attempts=2, base_delay_ms=500)


def backoff_delay_ms(attempt: int, base_delay_ms: int) -> int:
    """Delay after failed attempt `attempt` (1-indexed): base * 2^(attempt-1)"""
    return base_delay_ms * 2 ** (attempt - 1)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay_ms: int = 500,
    sleep: Sleeper = asyncio.sleep,
) -> T:
    """
    Await `operation()` up to `max_attempts` times.

    Failed attempt k (k < max_attempts) is followed by a wait of
    base_delay_ms * 2^(k-1) milliseconds, no jitter. The exception from
    the last attempt is re-raised unchanged.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if attempt == max_attempts:
                raise
            delay = backoff_delay_ms(attempt, base_delay_ms)
            logger.info(
                f"[Backoff] Retry attempt {attempt}/{max_attempts - 1} after {delay}ms ({exc})"
            )
            await sleep(delay / 1000)

    # unreachable: the loop either returns or raises
    raise RuntimeError("retry_with_backoff exhausted without result")
