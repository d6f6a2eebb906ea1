"""Unified error hierarchy for drivefetch.

Usage:
    from drivefetch.core.errors import TransportError, EmptyInputError
"""

from drivefetch.core.errors.base import DriveFetchError
from drivefetch.core.errors.reassembly import DecodeError, EmptyInputError
from drivefetch.core.errors.transport import TransportError

__all__ = [
    "DriveFetchError",
    "TransportError",
    "DecodeError",
    "EmptyInputError",
]
