"""Retry policy and injectable sleep protocol.

Defines the core types used across the resilience sub-package:
- RetryPolicy for attempt counting and backoff delays
- SleepFunc protocol for injectable async sleep
"""

import random
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and exponential backoff schedule.

    ``backoff(attempt)`` is ``base_delay * exponential_base**attempt`` capped
    at ``max_delay``. With ``jitter`` enabled the delay is scaled by a random
    factor in ``[0.5, 1.5)`` drawn from the supplied ``rng``.
    """

    max_retries: int = 3
    base_delay: float = 0.5
    max_delay: float = 60.0
    exponential_base: float = 2.0
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay <= 0:
            raise ValueError(f"base_delay must be > 0, got {self.base_delay}")

    @property
    def max_attempts(self) -> int:
        """Total attempts including the first one."""
        return self.max_retries + 1

    def backoff(self, attempt: int, rng: Optional[random.Random] = None) -> float:
        """Delay in seconds to wait after the failed ``attempt`` (0-based)."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)
        if self.jitter:
            delay *= 0.5 + (rng or random.Random()).random()
        return delay


class SleepFunc(Protocol):
    """Protocol for injectable sleep function."""

    async def __call__(self, seconds: float) -> None: ...
