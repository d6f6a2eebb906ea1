"""Wire models for replica records.

Only the fields the engine reads are modelled. A RawRecord stays a plain
``dict`` (the node's JSON body); the accessors below pull out its content
hash, its ChunkGroup and each fragment's type and message without assuming
the rest of the schema.

Record layout read by the engine::

    {
        "id": "<record id>",
        "meta": {"hash": "...", "height": "123", "timestamp": "456"},
        "transaction": {
            "type": 16705,
            "transactions": [
                {"transaction": {"type": 16724, "message": "00313233"}},
                ...
            ],
        },
    }
"""

import logging
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class RecordType(IntEnum):
    """Record type codes understood by the engine."""

    AGGREGATE_COMPLETE = 16705
    AGGREGATE_BONDED = 16961
    TRANSFER = 16724


DEFAULT_AGGREGATE_TYPES: tuple[int, ...] = (
    int(RecordType.AGGREGATE_BONDED),
    int(RecordType.AGGREGATE_COMPLETE),
)

MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class SortOrder(str, Enum):
    """Page ordering requested from the record index."""

    ASC = "asc"
    DESC = "desc"


class RecordRef(BaseModel):
    """Index entry identifying one record on the replicas."""

    model_config = ConfigDict(frozen=True)

    content_hash: str = Field(..., min_length=1, description="Unique hash of the record")
    record_id: str = Field(default="", description="Replica-local record id (pagination cursor)")
    height: int = Field(default=0, ge=0, description="Block height the record was confirmed at")
    timestamp: str = Field(default="", description="Confirmation timestamp as served by the replica")

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Optional["RecordRef"]:
        """Build a RecordRef from a wire record, or None if it has no hash."""
        content_hash = record_hash(record)
        if not content_hash:
            return None
        meta = record.get("meta") or {}
        try:
            height = int(meta.get("height") or 0)
        except (TypeError, ValueError):
            height = 0
        return cls(
            content_hash=content_hash,
            record_id=str(record.get("id") or ""),
            height=max(height, 0),
            timestamp=str(meta.get("timestamp") or ""),
        )


class FetchOptions(BaseModel):
    """Caller-facing options shared by enumeration and bulk fetch."""

    page_size: int = Field(default=MAX_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)
    types: tuple[int, ...] = Field(
        default=DEFAULT_AGGREGATE_TYPES, validate_default=True, description="Record type filter codes"
    )
    order: SortOrder = Field(default=SortOrder.DESC)
    concurrency: int = Field(default=8, gt=0, description="Maximum in-flight record fetches")
    retries: int = Field(default=3, ge=0, description="Retries per hash after the first attempt")
    base_delay_ms: int = Field(default=500, gt=0, description="Backoff base delay in milliseconds")
    debug: bool = False

    @field_validator("types")
    @classmethod
    def _unique_types(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if not value:
            raise ValueError("types must contain at least one record type code")
        return tuple(sorted(set(int(v) for v in value)))

    @property
    def base_delay(self) -> float:
        """Backoff base delay in seconds."""
        return self.base_delay_ms / 1000.0


# ---------------------------------------------------------------------------
# RawRecord accessors
# ---------------------------------------------------------------------------


def record_hash(record: Any) -> Optional[str]:
    """Return ``meta.hash`` of a wire record, or None."""
    if not isinstance(record, dict):
        return None
    meta = record.get("meta")
    if not isinstance(meta, dict):
        return None
    value = meta.get("hash")
    return str(value) if value else None


def chunk_group(record: Any) -> Optional[list[dict[str, Any]]]:
    """Return the ordered fragment list of an aggregate record, or None.

    Positions are significant, so a non-object entry becomes an empty
    fragment rather than being dropped.
    """
    if not isinstance(record, dict):
        return None
    body = record.get("transaction")
    if not isinstance(body, dict):
        return None
    inner = body.get("transactions")
    if not isinstance(inner, list):
        return None
    return [entry if isinstance(entry, dict) else {} for entry in inner]


def fragment_type(fragment: dict[str, Any]) -> Optional[int]:
    body = fragment.get("transaction")
    if not isinstance(body, dict):
        return None
    try:
        return int(body.get("type"))
    except (TypeError, ValueError):
        return None


def fragment_message(fragment: dict[str, Any]) -> str:
    """Hex message of a fragment; absent or non-string messages read as ``""``."""
    body = fragment.get("transaction")
    if not isinstance(body, dict):
        return ""
    message = body.get("message")
    return message if isinstance(message, str) else ""
