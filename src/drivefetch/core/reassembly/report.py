"""Gap and duplicate diagnostics for a reconstruction."""

from dataclasses import dataclass, field
from typing import Optional, Sequence


@dataclass(frozen=True)
class DiscardedDuplicate:
    """A chunk group dropped because an earlier one claimed the same key.

    Attributes:
        key: The colliding sequence key
        discarded_at: Position of the dropped record in the reassembly input
        content_hash: Hash of the dropped record, if it had one
        preview: First 50 decoded characters of the dropped group's content
    """

    key: int
    discarded_at: int
    content_hash: Optional[str] = None
    preview: str = ""


@dataclass(frozen=True)
class SequenceRange:
    min: int
    max: int

    @property
    def span(self) -> int:
        return self.max - self.min + 1


@dataclass
class ReconstructionReport:
    """Completeness of the sequence key set.

    ``missing_sequence_keys`` are the integers in ``[min, max]`` absent from
    the deduplicated keys; ``completeness_percentage`` is
    ``present / (max - min + 1) * 100`` rounded to 2 places.
    """

    is_complete: bool
    completeness_percentage: float
    missing_sequence_keys: list[int]
    sequence_range: SequenceRange
    duplicates_discarded: list[DiscardedDuplicate] = field(default_factory=list)


def analyze_gaps(
    keys: Sequence[int],
    duplicates: Sequence[DiscardedDuplicate] = (),
) -> ReconstructionReport:
    """Build a report over a set of unique sequence keys.

    Raises:
        ValueError: If ``keys`` is empty.
    """
    if not keys:
        raise ValueError("analyze_gaps requires at least one sequence key")
    ordered = sorted(set(keys))
    missing: list[int] = []
    for previous, current in zip(ordered, ordered[1:]):
        missing.extend(range(previous + 1, current))

    seq_range = SequenceRange(min=ordered[0], max=ordered[-1])
    percentage = round(len(ordered) / seq_range.span * 100, 2)
    return ReconstructionReport(
        is_complete=not missing,
        completeness_percentage=percentage,
        missing_sequence_keys=missing,
        sequence_range=seq_range,
        duplicates_discarded=list(duplicates),
    )
