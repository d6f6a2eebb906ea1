"""Async retry with exponential backoff.

The retried callable receives the 0-based attempt number so callers can
rotate to another replica on every attempt.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Type, TypeVar

from drivefetch.core.resilience.models import RetryPolicy, SleepFunc

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def async_retry_with_backoff(
    func: Callable[[int], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retryable_exceptions: Optional[list[Type[Exception]]] = None,
    rng: Optional[random.Random] = None,
    sleep_func: Optional[SleepFunc] = None,
) -> T:
    """Call ``func(attempt)`` until it succeeds or the policy is exhausted.

    Args:
        func: Async callable taking the attempt number (0-based).
        policy: Attempt budget and backoff schedule.
        retryable_exceptions: Exceptions to retry on (default: all).
        rng: Injectable Random instance for deterministic jitter in tests.
        sleep_func: Injectable sleep function for time control in tests.

    Returns:
        Result from the function on success.

    Raises:
        Exception: The last exception if all attempts are exhausted.

    Testing example:
        >>> sleep_times = []
        >>> async def fake_sleep(s): sleep_times.append(s)
        >>> await async_retry_with_backoff(
        ...     fetch_once, policy=RetryPolicy(max_retries=2), sleep_func=fake_sleep
        ... )
    """
    retryable = tuple(retryable_exceptions or [Exception])
    last_exception: Optional[Exception] = None
    _sleep = sleep_func or asyncio.sleep

    for attempt in range(policy.max_attempts):
        try:
            return await func(attempt)
        except retryable as e:
            last_exception = e

            if attempt == policy.max_retries:
                break

            delay = policy.backoff(attempt, rng)
            logger.debug("Attempt %d failed (%s); retrying in %.3fs", attempt + 1, e, delay)
            await _sleep(delay)

    if last_exception:
        raise last_exception
    raise RuntimeError("async_retry_with_backoff: unexpected state")
