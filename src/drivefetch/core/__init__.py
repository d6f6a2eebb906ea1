"""Fetch-and-reassemble engine for replicated drive records."""

from drivefetch.core.bulk_fetch import BulkFetcher, FetchResult
from drivefetch.core.enumerator import CursorEnumerator
from drivefetch.core.fetcher import DriveDownload, DriveFetcher
from drivefetch.core.fragments import decode_fragment, decode_fragment_text
from drivefetch.core.progress import FetchPhase, ProgressPublisher, ProgressSnapshot
from drivefetch.core.reassembly import (
    ReassemblyOptions,
    Reconstruction,
    ReconstructedHeader,
    ReconstructionReport,
    reassemble,
)
from drivefetch.core.records import FetchOptions, RecordRef, RecordType, SortOrder
from drivefetch.core.replicas import ReplicaPool

__all__ = [
    "BulkFetcher",
    "FetchResult",
    "CursorEnumerator",
    "DriveDownload",
    "DriveFetcher",
    "decode_fragment",
    "decode_fragment_text",
    "FetchPhase",
    "ProgressPublisher",
    "ProgressSnapshot",
    "ReassemblyOptions",
    "Reconstruction",
    "ReconstructedHeader",
    "ReconstructionReport",
    "reassemble",
    "FetchOptions",
    "RecordRef",
    "RecordType",
    "SortOrder",
    "ReplicaPool",
]
