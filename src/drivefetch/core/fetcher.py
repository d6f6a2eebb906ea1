"""DriveFetcher: public entry point of the fetch-and-reassemble engine.

Wires the Replica Pool, Cursor Enumerator, Bulk Fetcher and Reassembler
together around one Progress Publisher.

Example usage:
    fetcher = DriveFetcher(["https://node-a:3001", "https://node-b:3001"])
    download = await fetcher.fetch_drive("NDRIVE...ADDRESS")
    print(download.reconstruction.mime_type, download.reconstruction.size)
"""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from drivefetch.core.bulk_fetch import BulkFetcher, FetchResult, HashLike
from drivefetch.core.enumerator import DEFAULT_TIMEOUT, RECORDS_PATH, CursorEnumerator
from drivefetch.core.progress import FetchPhase, ProgressPublisher, ProgressSnapshot
from drivefetch.core.reassembly import ReassemblyOptions, Reconstruction, reassemble
from drivefetch.core.records import FetchOptions, RecordRef
from drivefetch.core.replicas import ReplicaPool
from drivefetch.core.resilience import SleepFunc

if TYPE_CHECKING:
    from drivefetch.config import FetcherConfig

logger = logging.getLogger(__name__)


@dataclass
class DriveDownload:
    """Everything produced by one :meth:`DriveFetcher.fetch_drive` run."""

    reconstruction: Reconstruction
    refs: list[RecordRef] = field(default_factory=list)
    failed: list[FetchResult] = field(default_factory=list)

    @property
    def failed_hashes(self) -> list[str]:
        return [r.hash for r in self.failed]


class DriveFetcher:
    """Facade over enumeration, bulk fetch and reassembly.

    Attributes:
        pool: Replicas shared by every stage
        defaults: Options used when a call passes none
    """

    def __init__(
        self,
        nodes: Union[ReplicaPool, Iterable[str]],
        *,
        defaults: Optional[FetchOptions] = None,
        records_path: str = RECORDS_PATH,
        timeout: float = DEFAULT_TIMEOUT,
        sleep_func: Optional[SleepFunc] = None,
    ):
        self.pool = nodes if isinstance(nodes, ReplicaPool) else ReplicaPool(nodes)
        self.defaults = defaults or FetchOptions()
        self._progress = ProgressPublisher()
        self._enumerator = CursorEnumerator(self.pool, records_path=records_path, timeout=timeout)
        self._bulk = BulkFetcher(
            self.pool,
            self._progress,
            records_path=records_path,
            timeout=timeout,
            sleep_func=sleep_func,
        )

    @classmethod
    def from_config(cls, config: "FetcherConfig", **kwargs: Any) -> "DriveFetcher":
        """Build a fetcher from a loaded :class:`FetcherConfig`."""
        return cls(
            config.nodes,
            defaults=config.defaults,
            records_path=config.records_path,
            timeout=config.timeout,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    def get_progress(self) -> ProgressSnapshot:
        return self._progress.snapshot()

    def reset_progress(self) -> ProgressSnapshot:
        return self._progress.reset()

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    async def enumerate_aggregate_refs(
        self,
        address: str,
        opts: Optional[FetchOptions] = None,
        *,
        replica_index: int = 0,
    ) -> list[RecordRef]:
        """List every aggregate record touching ``address``.

        Raises:
            TransportError: If any index page fails; enumeration is all-or-nothing.
        """
        opts = opts or self.defaults
        self._progress.begin(FetchPhase.FETCHING_LIST, message=f"Listing records for {address}")
        try:
            refs = await self._enumerator.enumerate(
                address,
                opts.types,
                opts.page_size,
                opts.order,
                replica_index=replica_index,
            )
        except Exception as e:
            self._progress.set_message(f"Record listing failed: {e}")
            logger.error("Enumeration for %s failed: %s", address, e)
            raise
        self._progress.set_message(f"Found {len(refs)} records")
        if opts.debug:
            logger.info("Enumerated %d refs for %s", len(refs), address)
        return refs

    async def enumerate_incoming_refs(
        self,
        recipient_address: str,
        opts: Optional[FetchOptions] = None,
        *,
        replica_index: int = 0,
    ) -> list[RecordRef]:
        """List every record received by ``recipient_address``."""
        opts = opts or self.defaults
        self._progress.begin(FetchPhase.FETCHING_LIST, message=f"Listing incoming records for {recipient_address}")
        try:
            refs = await self._enumerator.enumerate_incoming(
                recipient_address,
                opts.page_size,
                opts.order,
                replica_index=replica_index,
            )
        except Exception as e:
            self._progress.set_message(f"Record listing failed: {e}")
            logger.error("Incoming enumeration for %s failed: %s", recipient_address, e)
            raise
        self._progress.set_message(f"Found {len(refs)} records")
        return refs

    async def fetch_bodies(
        self,
        hashes: Iterable[HashLike],
        opts: Optional[FetchOptions] = None,
    ) -> list[FetchResult]:
        """Fetch record bodies; never raises for individual hash failures."""
        opts = opts or self.defaults
        results = await self._bulk.fetch_all(
            hashes,
            concurrency=opts.concurrency,
            retries=opts.retries,
            base_delay=opts.base_delay,
        )
        failed = sum(1 for r in results if not r.ok)
        self._progress.set_message(f"Fetched {len(results) - failed}/{len(results)} records")
        if opts.debug:
            for result in results:
                logger.info(
                    "%s: %s after %d attempts via %s",
                    result.hash,
                    "ok" if result.ok else f"failed ({result.error})",
                    result.attempts,
                    result.replica,
                )
        return results

    def reassemble(
        self,
        raw_records: Iterable[Union[FetchResult, Optional[dict[str, Any]]]],
        opts: Optional[ReassemblyOptions] = None,
    ) -> Reconstruction:
        """Reassemble fetched records (raw dicts or FetchResults).

        Raises:
            EmptyInputError: If no usable aggregate is present.
        """
        opts = opts or ReassemblyOptions(debug=self.defaults.debug)
        records = [r.record if isinstance(r, FetchResult) else r for r in raw_records]
        self._progress.begin(FetchPhase.PROCESSING, message=f"Reassembling {len(records)} records")
        try:
            reconstruction = reassemble(records, opts)
        except Exception as e:
            self._progress.set_message(f"Reassembly failed: {e}")
            logger.error("Reassembly failed: %s", e)
            raise
        self._progress.complete(
            f"Reassembled {reconstruction.size} bytes ({reconstruction.mime_type})"
        )
        return reconstruction

    async def fetch_drive(
        self,
        address: str,
        opts: Optional[FetchOptions] = None,
        reassembly: Optional[ReassemblyOptions] = None,
    ) -> DriveDownload:
        """Run enumerate -> fetch -> reassemble for one drive address."""
        opts = opts or self.defaults
        refs = await self.enumerate_aggregate_refs(address, opts)
        results = await self.fetch_bodies(refs, opts)
        reconstruction = self.reassemble(
            results, reassembly or ReassemblyOptions(debug=opts.debug)
        )
        failed = [r for r in results if not r.ok]
        return DriveDownload(reconstruction=reconstruction, refs=refs, failed=failed)
