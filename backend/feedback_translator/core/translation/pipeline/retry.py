"""Retry executor with exponential backoff and jitter.

Delay before retry n (1-indexed) is ``base * 2**(n-1)`` plus up to
``max_jitter`` of uniform random noise. Every exception is retried.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from feedback_translator.core.errors import ModelUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000
DEFAULT_MAX_JITTER_MS = 1000


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    *,
    max_jitter_ms: int = DEFAULT_MAX_JITTER_MS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation``, retrying up to ``max_retries`` more times on failure.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_retries: Retries after the first attempt
        base_delay_ms: Delay before the first retry, doubled each time
        max_jitter_ms: Upper bound of the random delay added to each wait
        sleep: Coroutine used to wait (seconds)

    Returns:
        The first successful result

    Raises:
        ModelUnavailableError: After ``max_retries + 1`` failed attempts
    """
    attempts = max_retries + 1
    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=base_delay_ms / 1000, exp_base=2, min=0)
        + wait_random(0, max_jitter_ms / 1000),
        sleep=sleep,
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )

    async def attempt() -> T:
        return await operation()

    try:
        return await retrying(attempt)
    except RetryError as e:
        last_error = e.last_attempt.exception()
        raise ModelUnavailableError(
            f"Failed after {attempts} attempts. Last error: {last_error}"
        ) from last_error
