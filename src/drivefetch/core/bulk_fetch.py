"""Bulk fetcher.

Retrieves full record bodies for a list of content hashes across every
replica with bounded concurrency.

Design:
    - A fixed pool of ``min(concurrency, len(hashes))`` asyncio tasks drains
      a queue of ``(index, hash)`` work items, so at most ``concurrency``
      requests are ever in flight.
    - Worker ``w`` sends attempt ``a`` to ``replica[(w + a) % n]``: every
      retry rotates to another replica, so one bad node cannot starve a hash.
    - Retries follow a :class:`RetryPolicy` (``base_delay * 2**attempt``)
      with an injectable sleep.
    - A hash that exhausts its retries yields ``FetchResult(record=None,
      error=...)``; it never aborts the batch. Inputs without a hash get
      a failed slot of their own.
    - Results come back in input order regardless of completion order.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Union

import httpx

from drivefetch.core.enumerator import DEFAULT_TIMEOUT, RECORDS_PATH
from drivefetch.core.errors import TransportError
from drivefetch.core.progress import FetchPhase, ProgressPublisher
from drivefetch.core.records import RecordRef, record_hash
from drivefetch.core.replicas import ReplicaPool
from drivefetch.core.resilience import RetryPolicy, SleepFunc, async_retry_with_backoff
from drivefetch.core.transport import get_json

logger = logging.getLogger(__name__)

HashLike = Union[str, RecordRef, dict[str, Any]]


@dataclass
class FetchResult:
    """Outcome of fetching one content hash.

    Attributes:
        hash: The requested content hash
        record: Record body on success, None on failure
        error: Last error on failure, None on success
        attempts: Number of requests made for this hash
        replica: Replica that served the record (or failed last)
    """

    hash: str
    record: Optional[dict[str, Any]] = None
    error: Optional[Exception] = None
    attempts: int = 0
    replica: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


def normalize_hashes(items: Iterable[HashLike]) -> list[Optional[str]]:
    """Turn hashes, RecordRefs or raw records into hash strings, one per item.

    Items that carry no hash (empty strings, raw records without
    ``meta.hash``) map to None so positions stay aligned with the input.
    """
    hashes: list[Optional[str]] = []
    for item in items:
        if isinstance(item, RecordRef):
            hashes.append(item.content_hash)
        elif isinstance(item, dict):
            hashes.append(record_hash(item))
        elif item:
            hashes.append(str(item))
        else:
            hashes.append(None)
    return hashes


class BulkFetcher:
    """Concurrency-bounded, retrying fetch of record bodies by hash."""

    def __init__(
        self,
        pool: ReplicaPool,
        progress: Optional[ProgressPublisher] = None,
        *,
        records_path: str = RECORDS_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        sleep_func: Optional[SleepFunc] = None,
    ):
        self.pool = pool
        self.progress = progress or ProgressPublisher()
        self.records_path = records_path
        self.timeout = timeout
        self._sleep = sleep_func or asyncio.sleep

    async def fetch_all(
        self,
        hashes: Iterable[HashLike],
        concurrency: int = 8,
        retries: int = 3,
        base_delay: float = 0.5,
    ) -> list[FetchResult]:
        """Fetch every hash; one result per input hash, in input order.

        Args:
            hashes: Content hashes (or RecordRefs / raw records carrying one).
            concurrency: Maximum in-flight requests.
            retries: Retries per hash after the first attempt.
            base_delay: Backoff base delay in seconds.

        Returns:
            List of FetchResult, same length and order as the input.
        """
        if concurrency <= 0:
            raise ValueError(f"concurrency must be > 0, got {concurrency}")
        policy = RetryPolicy(max_retries=retries, base_delay=base_delay)

        items = normalize_hashes(hashes)
        total = len(items)
        self.progress.begin(
            FetchPhase.FETCHING_DETAILS,
            total_steps=total,
            message=f"Fetching {total} records",
        )
        if not items:
            return []

        queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()
        results: list[Optional[FetchResult]] = [None] * total
        for index, content_hash in enumerate(items):
            if content_hash is None:
                results[index] = FetchResult(
                    hash="",
                    error=ValueError(f"Fetch input {index} carries no content hash"),
                )
                self.progress.advance()
                logger.warning("Fetch input %d carries no content hash; skipped", index)
                continue
            queue.put_nowait((index, content_hash))

        if queue.empty():
            return [r for r in results if r is not None]

        async with httpx.AsyncClient(timeout=self.timeout) as client:

            async def worker(worker_id: int) -> None:
                while True:
                    try:
                        index, content_hash = queue.get_nowait()
                    except asyncio.QueueEmpty:
                        return
                    result = await self._fetch_one(client, worker_id, content_hash, policy)
                    results[index] = result
                    snapshot = self.progress.advance()
                    logger.debug(
                        "Fetched %d/%d (%.2f%%): %s %s",
                        snapshot.current_step,
                        total,
                        snapshot.percentage,
                        content_hash,
                        "ok" if result.ok else "failed",
                    )

            workers = min(concurrency, queue.qsize())
            await asyncio.gather(*(worker(w) for w in range(workers)))

        failed = sum(1 for r in results if r is not None and not r.ok)
        if failed:
            logger.warning("%d of %d records could not be fetched", failed, total)
        return [r for r in results if r is not None]

    async def _fetch_one(
        self,
        client: httpx.AsyncClient,
        worker_id: int,
        content_hash: str,
        policy: RetryPolicy,
    ) -> FetchResult:
        result = FetchResult(hash=content_hash)

        async def attempt(n: int) -> dict[str, Any]:
            endpoint = self.pool.select(worker_id + n)
            result.attempts = n + 1
            result.replica = endpoint
            body = await get_json(client, endpoint, f"{self.records_path}/{content_hash}")
            if not isinstance(body, dict):
                raise TransportError(endpoint=endpoint, message="Record body is not a JSON object")
            served = record_hash(body)
            if served is not None and served.lower() != content_hash.lower():
                raise TransportError(
                    endpoint=endpoint,
                    message=f"Replica served hash {served} for {content_hash}",
                )
            return body

        try:
            result.record = await async_retry_with_backoff(
                attempt,
                policy=policy,
                retryable_exceptions=[TransportError],
                sleep_func=self._sleep,
            )
        except TransportError as e:
            logger.warning(
                "Giving up on %s after %d attempts: %s",
                content_hash,
                result.attempts,
                e,
            )
            result.error = e
        return result
