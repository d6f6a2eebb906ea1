"""Retry utilities shared by the replica clients.

- RetryPolicy: attempt budget plus a pure ``backoff(attempt)`` schedule
- async_retry_with_backoff: drives a callable through the policy
- SleepFunc: protocol for the injectable sleep used by both
"""

from drivefetch.core.resilience.models import RetryPolicy, SleepFunc
from drivefetch.core.resilience.retry import async_retry_with_backoff

__all__ = [
    "RetryPolicy",
    "SleepFunc",
    "async_retry_with_backoff",
]
