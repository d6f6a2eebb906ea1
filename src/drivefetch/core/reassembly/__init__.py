"""Drive reassembly: ordering, header extraction and gap analysis."""

from drivefetch.core.reassembly.header import (
    DATA_URL_RE,
    HEADER_POSITION,
    HEADER_SLOTS,
    ReconstructedHeader,
)
from drivefetch.core.reassembly.reassembler import (
    ReassemblyOptions,
    Reconstruction,
    reassemble,
)
from drivefetch.core.reassembly.report import (
    DiscardedDuplicate,
    ReconstructionReport,
    SequenceRange,
    analyze_gaps,
)

__all__ = [
    "DATA_URL_RE",
    "HEADER_POSITION",
    "HEADER_SLOTS",
    "ReconstructedHeader",
    "ReassemblyOptions",
    "Reconstruction",
    "reassemble",
    "DiscardedDuplicate",
    "ReconstructionReport",
    "SequenceRange",
    "analyze_gaps",
]
