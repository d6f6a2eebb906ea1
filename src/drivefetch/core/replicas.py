"""Replica pool.

Holds the list of equivalent read endpoints (blockchain full nodes serving
the same REST surface) and hands them out by index or round-robin.
Replicas are assumed logically equivalent but may lag or disagree, so no
selection here is sticky: callers rotate on every retry.
"""

import logging
import threading
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


class ReplicaPool:
    """Immutable set of replica base URLs with indexed and round-robin selection.

    Example:
        >>> pool = ReplicaPool(["https://node-a:3001", "https://node-b:3001/"])
        >>> pool.select(3)
        'https://node-b:3001'
    """

    def __init__(self, endpoints: Iterable[str]):
        cleaned = tuple(e.strip().rstrip("/") for e in endpoints if e and e.strip())
        if not cleaned:
            raise ValueError("ReplicaPool requires at least one endpoint")
        self._endpoints = cleaned
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def endpoints(self) -> tuple[str, ...]:
        return self._endpoints

    def select(self, index: int) -> str:
        """Return the replica at ``index`` modulo the pool size."""
        return self._endpoints[index % len(self._endpoints)]

    def next(self) -> str:
        """Return the next replica in round-robin order."""
        with self._lock:
            endpoint = self._endpoints[self._cursor % len(self._endpoints)]
            self._cursor += 1
        return endpoint

    def __len__(self) -> int:
        return len(self._endpoints)

    def __iter__(self) -> Iterator[str]:
        return iter(self._endpoints)

    def __repr__(self) -> str:
        return f"ReplicaPool({list(self._endpoints)!r})"
