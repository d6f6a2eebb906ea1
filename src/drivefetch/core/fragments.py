"""Fragment decoder.

A fragment message is a hex string whose first byte is a message-type tag
and whose remaining bytes are content, possibly padded with NUL bytes.
Decoding drops the tag and strips trailing NULs only: general whitespace
trimming would corrupt binary payload chunks.

The public decoders never raise. Malformed input yields an empty value, a
warning log entry and, when a ``diagnostics`` list is supplied, a
:class:`DecodeError` appended to it.
"""

import logging
import re
from typing import Optional

from drivefetch.core.errors import DecodeError

logger = logging.getLogger(__name__)

_HEX_RE = re.compile(r"^[0-9a-fA-F]*$")


def parse_fragment_hex(hex_message: Optional[str]) -> bytes:
    """Strictly decode a fragment message into content bytes.

    Raises:
        DecodeError: If the input is not an even-length hex string.
    """
    if hex_message is None:
        raise DecodeError(hex_message, "message is missing")
    if len(hex_message) % 2:
        raise DecodeError(hex_message, f"odd length {len(hex_message)}")
    if not _HEX_RE.match(hex_message):
        raise DecodeError(hex_message, "non-hex characters")
    return bytes.fromhex(hex_message)[1:].rstrip(b"\x00")


def decode_fragment(
    hex_message: Optional[str],
    diagnostics: Optional[list[DecodeError]] = None,
) -> bytes:
    """Decode a fragment message, failing soft to ``b""``.

    Args:
        hex_message: Hex-encoded message (type tag + content).
        diagnostics: Optional sink collecting a DecodeError per malformed input.

    Returns:
        Content bytes without the type tag and trailing NUL padding.
    """
    if not hex_message or len(hex_message) < 2:
        logger.debug("Empty fragment message (%r)", hex_message)
        return b""
    try:
        return parse_fragment_hex(hex_message)
    except DecodeError as e:
        logger.warning("Skipping malformed fragment: %s", e)
        if diagnostics is not None:
            diagnostics.append(e)
        return b""


def decode_fragment_text(
    hex_message: Optional[str],
    diagnostics: Optional[list[DecodeError]] = None,
) -> str:
    """Decode a fragment message as UTF-8 text (invalid sequences replaced)."""
    return decode_fragment(hex_message, diagnostics).decode("utf-8", errors="replace")


def encode_fragment(content: bytes, type_tag: int = 0) -> str:
    """Inverse of :func:`decode_fragment`: tag byte + content as uppercase hex."""
    return (bytes([type_tag]) + content).hex().upper()
