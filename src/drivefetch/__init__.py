"""drivefetch: rebuild drive payloads split across replicated blockchain records."""

from drivefetch.config import FetcherConfig, get_config, set_config
from drivefetch.core import (
    DriveDownload,
    DriveFetcher,
    FetchOptions,
    FetchPhase,
    FetchResult,
    ProgressSnapshot,
    ReassemblyOptions,
    Reconstruction,
    RecordRef,
    RecordType,
    ReplicaPool,
    SortOrder,
    decode_fragment,
    reassemble,
)
from drivefetch.core.errors import (
    DecodeError,
    DriveFetchError,
    EmptyInputError,
    TransportError,
)

__all__ = [
    "FetcherConfig",
    "get_config",
    "set_config",
    "DriveDownload",
    "DriveFetcher",
    "FetchOptions",
    "FetchPhase",
    "FetchResult",
    "ProgressSnapshot",
    "ReassemblyOptions",
    "Reconstruction",
    "RecordRef",
    "RecordType",
    "ReplicaPool",
    "SortOrder",
    "decode_fragment",
    "reassemble",
    "DecodeError",
    "DriveFetchError",
    "EmptyInputError",
    "TransportError",
]
