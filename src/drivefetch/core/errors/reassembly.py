"""Reassembly error classes."""

from typing import Optional

from drivefetch.core.errors.base import DriveFetchError


class DecodeError(DriveFetchError):
    """A fragment payload is not valid hex.

    Only the strict parser raises this. The public decoder converts it into
    an empty result plus a diagnostic log entry.

    Attributes:
        value: The offending input (truncated to 64 characters)
        reason: Why the input was rejected
    """

    def __init__(self, value: Optional[str], reason: str):
        self.value = (value or "")[:64]
        self.reason = reason
        super().__init__(f"Cannot decode fragment {self.value!r}: {reason}")


class EmptyInputError(DriveFetchError):
    """No usable aggregate was found in the fetched records."""
