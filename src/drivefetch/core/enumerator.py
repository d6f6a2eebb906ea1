"""Cursor enumerator.

Pages through one replica's filtered record index and returns the
deduplicated list of :class:`RecordRef`. A single replica is used for the
whole walk: cursors are not composable across replicas, which may hold
divergent data for the same offset.

Termination:
    - a page returns no records (``data`` absent or empty), or
    - the next ``offset`` cannot be determined (last record has no id, or
      the id did not advance).

Any non-2xx status is fatal. Callers need the complete hash list before
fetching, so a partial enumeration is never returned silently.
"""

import logging
from typing import Any, Iterable, Optional

import httpx

from drivefetch.core.records import (
    DEFAULT_AGGREGATE_TYPES,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    RecordRef,
    SortOrder,
)
from drivefetch.core.replicas import ReplicaPool
from drivefetch.core.transport import get_json

logger = logging.getLogger(__name__)

RECORDS_PATH = "/records/confirmed"
DEFAULT_TIMEOUT = 30.0


class CursorEnumerator:
    """Offset-cursor pagination over a single replica's record index.

    Attributes:
        pool: Replica pool to pick the enumeration replica from
        records_path: Index path appended to the replica base URL
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        pool: ReplicaPool,
        *,
        records_path: str = RECORDS_PATH,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.pool = pool
        self.records_path = records_path
        self.timeout = timeout

    async def enumerate(
        self,
        filter_address: str,
        filter_types: Iterable[int] = DEFAULT_AGGREGATE_TYPES,
        page_size: int = MAX_PAGE_SIZE,
        order: SortOrder = SortOrder.DESC,
        *,
        replica_index: int = 0,
    ) -> list[RecordRef]:
        """Enumerate every record touching ``filter_address`` with one of ``filter_types``.

        Raises:
            ValueError: If ``page_size`` is outside 10-100 or no type is given.
            TransportError: If any page request fails.
        """
        types = sorted({int(t) for t in filter_types})
        if not types:
            raise ValueError("filter_types must contain at least one record type code")
        params: list[tuple[str, Any]] = [("address", filter_address)]
        params.extend(("type", t) for t in types)
        return await self._walk(params, page_size, SortOrder(order), replica_index)

    async def enumerate_incoming(
        self,
        recipient_address: str,
        page_size: int = MAX_PAGE_SIZE,
        order: SortOrder = SortOrder.DESC,
        *,
        replica_index: int = 0,
    ) -> list[RecordRef]:
        """Enumerate records received by ``recipient_address``, embedded entries included."""
        params: list[tuple[str, Any]] = [
            ("recipientAddress", recipient_address),
            ("embedded", "true"),
        ]
        return await self._walk(params, page_size, SortOrder(order), replica_index)

    async def _walk(
        self,
        filter_params: list[tuple[str, Any]],
        page_size: int,
        order: SortOrder,
        replica_index: int,
    ) -> list[RecordRef]:
        if not MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, got {page_size}"
            )

        endpoint = self.pool.select(replica_index)
        refs: list[RecordRef] = []
        seen: set[str] = set()
        offset: Optional[str] = None
        pages = 0

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while True:
                params = list(filter_params)
                params += [
                    ("pageSize", page_size),
                    ("pageNumber", 1),
                    ("order", order.value),
                ]
                if offset is not None:
                    params.append(("offset", offset))

                body = await get_json(client, endpoint, self.records_path, params)
                records = body.get("data") if isinstance(body, dict) else None
                if not isinstance(records, list) or not records:
                    break
                pages += 1

                for record in records:
                    ref = RecordRef.from_record(record) if isinstance(record, dict) else None
                    if ref is None:
                        logger.warning("Skipping record without content hash on %s", endpoint)
                        continue
                    if ref.content_hash in seen:
                        continue
                    seen.add(ref.content_hash)
                    refs.append(ref)

                last = records[-1]
                next_offset = last.get("id") if isinstance(last, dict) else None
                if not next_offset:
                    logger.warning("Page %d on %s has no trailing record id; stopping", pages, endpoint)
                    break
                next_offset = str(next_offset)
                if next_offset == offset:
                    logger.warning("Cursor did not advance past %s on %s; stopping", offset, endpoint)
                    break
                offset = next_offset
                logger.debug("Page %d on %s: %d records, next offset %s", pages, endpoint, len(records), offset)

        logger.info("Enumerated %d unique records over %d pages from %s", len(refs), pages, endpoint)
        return refs
