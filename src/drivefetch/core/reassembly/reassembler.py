"""Reassembler.

Rebuilds one drive payload from fetched aggregate records:

1. keep records whose chunk group contains a transfer fragment;
2. read each group's sequence key from position 0 (base-10 integer text),
   discarding groups whose key is not numeric;
3. first-seen key wins, later collisions are recorded, never merged;
4. sort keys ascending: this order alone fixes the payload layout;
5. decode every fragment's content bytes;
6. detect the header on the lowest-key group (position 15 is a
   ``data:<mime>;base64,`` URL), otherwise fall back to ``text/plain``;
7. concatenate positions >= 15 of the header group and >= 1 of every other
   group (>= 1 everywhere when no header was found);
8. optionally analyse gaps in the key set;
9. record the payload size in bytes.
"""

import base64
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from pydantic import BaseModel, Field

from drivefetch.core.errors import DecodeError, EmptyInputError
from drivefetch.core.fragments import decode_fragment, decode_fragment_text
from drivefetch.core.records import (
    RecordType,
    chunk_group,
    fragment_message,
    fragment_type,
    record_hash,
)
from drivefetch.core.reassembly.header import (
    FALLBACK_MIME_TYPE,
    HEADER_POSITION,
    ReconstructedHeader,
    match_data_url,
)
from drivefetch.core.reassembly.report import (
    DiscardedDuplicate,
    ReconstructionReport,
    analyze_gaps,
)

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[+-]?\d+$")
PREVIEW_CHARS = 50


class ReassemblyOptions(BaseModel):
    """Options for :func:`reassemble`."""

    analyze_gaps: bool = Field(default=True, description="Compute the gap/completeness report")
    debug: bool = Field(default=False, description="Log per-group details at INFO")
    transfer_type: int = Field(default=int(RecordType.TRANSFER), description="Fragment type marking a drive aggregate")


@dataclass
class Reconstruction:
    """Result of reassembling one drive.

    Attributes:
        header: Named header slots (``mime_type`` is ``text/plain`` when no
            header was found)
        payload: Concatenated content bytes in ascending key order
        size: Payload length in bytes
        header_detected: Whether the lowest-key group carried a header
        sequence_keys: Surviving keys in payload order
        duplicates_discarded: Groups dropped on key collision
        decode_errors: Malformed fragments that decoded to empty bytes
        report: Gap analysis, None when disabled
    """

    header: ReconstructedHeader
    payload: bytes
    size: int
    header_detected: bool
    sequence_keys: list[int]
    duplicates_discarded: list[DiscardedDuplicate] = field(default_factory=list)
    decode_errors: list[DecodeError] = field(default_factory=list)
    report: Optional[ReconstructionReport] = None

    @property
    def mime_type(self) -> str:
        return self.header.mime_type

    def decoded_content(self) -> bytes:
        """Return the file bytes behind a ``data:`` URL payload.

        Without a detected header the payload is returned unchanged.

        Raises:
            ValueError: If the payload is not valid base64 after the prefix.
        """
        if not self.header_detected:
            return self.payload
        _, _, encoded = self.payload.partition(b",")
        return base64.b64decode(encoded, validate=False)


@dataclass
class _Group:
    key: int
    index: int
    content_hash: Optional[str]
    fragments: list[dict[str, Any]]


def _preview(fragments: list[dict[str, Any]]) -> str:
    text = ""
    for fragment in fragments[1:]:
        text += decode_fragment_text(fragment_message(fragment))
        if len(text) >= PREVIEW_CHARS:
            break
    return text[:PREVIEW_CHARS]


def reassemble(
    raw_records: Iterable[Optional[dict[str, Any]]],
    options: Optional[ReassemblyOptions] = None,
) -> Reconstruction:
    """Reassemble a drive from fetched aggregate records.

    ``None`` entries (failed fetches) are skipped.

    Raises:
        EmptyInputError: If no record carries a chunk group, none contains a
            transfer fragment, or none has a numeric sequence key.
    """
    options = options or ReassemblyOptions()
    log = logger.info if options.debug else logger.debug
    diagnostics: list[DecodeError] = []

    candidates: list[tuple[int, dict[str, Any], list[dict[str, Any]]]] = []
    for index, record in enumerate(raw_records):
        fragments = chunk_group(record)
        if fragments:
            candidates.append((index, record, fragments))
    if not candidates:
        raise EmptyInputError("No record contains a chunk group")

    transfers = [
        c for c in candidates if any(fragment_type(f) == options.transfer_type for f in c[2])
    ]
    if not transfers:
        raise EmptyInputError(
            f"None of {len(candidates)} aggregates contains a type {options.transfer_type} fragment"
        )

    groups: dict[int, _Group] = {}
    duplicates: list[DiscardedDuplicate] = []
    for index, record, fragments in transfers:
        key_text = decode_fragment_text(fragment_message(fragments[0]), diagnostics).strip()
        if not _KEY_RE.match(key_text):
            logger.warning(
                "Discarding aggregate %s at input %d: non-numeric sequence key %r",
                record_hash(record),
                index,
                key_text[:PREVIEW_CHARS],
            )
            continue
        key = int(key_text)
        if key in groups:
            duplicate = DiscardedDuplicate(
                key=key,
                discarded_at=index,
                content_hash=record_hash(record),
                preview=_preview(fragments),
            )
            duplicates.append(duplicate)
            logger.warning(
                "Duplicate sequence key %d at input %d (first seen at %d); discarded",
                key,
                index,
                groups[key].index,
            )
            continue
        groups[key] = _Group(key=key, index=index, content_hash=record_hash(record), fragments=fragments)

    if not groups:
        raise EmptyInputError("No aggregate has a numeric sequence key")

    keys = sorted(groups)
    decoded: dict[int, list[bytes]] = {
        key: [b""] + [decode_fragment(fragment_message(f), diagnostics) for f in groups[key].fragments[1:]]
        for key in keys
    }

    head = decoded[keys[0]]
    header: Optional[ReconstructedHeader] = None
    if len(head) > HEADER_POSITION:
        match = match_data_url(head[HEADER_POSITION].decode("utf-8", errors="replace"))
        if match:
            texts = [chunk.decode("utf-8", errors="replace") for chunk in head[:HEADER_POSITION]]
            header = ReconstructedHeader.from_slots(texts, mime_type=match.group(1))
    header_detected = header is not None
    if header is None:
        logger.info("No data URL header at position %d; treating content as %s", HEADER_POSITION, FALLBACK_MIME_TYPE)
        header = ReconstructedHeader(mime_type=FALLBACK_MIME_TYPE)

    payload = bytearray()
    for key in keys:
        start = HEADER_POSITION if header_detected and key == keys[0] else 1
        for chunk in decoded[key][start:]:
            payload.extend(chunk)
        log("Sequence key %d: %d fragments from input %d", key, len(decoded[key]), groups[key].index)

    header.size = len(payload)
    report = analyze_gaps(keys, duplicates) if options.analyze_gaps else None
    if report is not None and not report.is_complete:
        logger.warning(
            "Reconstruction incomplete: %.2f%% of keys %d-%d present, %d missing",
            report.completeness_percentage,
            report.sequence_range.min,
            report.sequence_range.max,
            len(report.missing_sequence_keys),
        )

    return Reconstruction(
        header=header,
        payload=bytes(payload),
        size=len(payload),
        header_detected=header_detected,
        sequence_keys=keys,
        duplicates_discarded=duplicates,
        decode_errors=diagnostics,
        report=report,
    )
