"""Fixed-layout drive header.

The aggregate holding the lowest sequence key may reserve fragment
positions 1-14 for named header slots, with position 15 opening the payload
as a ``data:<mime>;base64,`` URL. ``HEADER_SLOTS`` is the single place that
maps positions to field names.
"""

import re
from dataclasses import asdict, dataclass
from typing import Any, Optional, Sequence

HEADER_POSITION = 15
DATA_URL_RE = re.compile(r"^data:([^;]+);base64,(.*)$")
FALLBACK_MIME_TYPE = "text/plain"

HEADER_SLOTS: dict[int, str] = {
    1: "owner",
    2: "id",
    3: "serial",
    4: "message",
    5: "extension_1",
    6: "extension_2",
    7: "extension_3",
    8: "extension_4",
    9: "extension_5",
    10: "extension_6",
    11: "extension_7",
    12: "extension_8",
    13: "extension_9",
    14: "extension_10",
}


@dataclass
class ReconstructedHeader:
    """Named header slots of a reconstructed drive.

    ``size`` is the payload length in bytes, filled in once the payload has
    been assembled.
    """

    mime_type: str = FALLBACK_MIME_TYPE
    id: str = ""
    serial: str = ""
    owner: str = ""
    message: str = ""
    extension_1: str = ""
    extension_2: str = ""
    extension_3: str = ""
    extension_4: str = ""
    extension_5: str = ""
    extension_6: str = ""
    extension_7: str = ""
    extension_8: str = ""
    extension_9: str = ""
    extension_10: str = ""
    size: int = 0

    @classmethod
    def from_slots(cls, texts: Sequence[str], mime_type: str) -> "ReconstructedHeader":
        """Populate the header from decoded fragment texts indexed by position."""
        values = {
            field_name: texts[position] if position < len(texts) else ""
            for position, field_name in HEADER_SLOTS.items()
        }
        return cls(mime_type=mime_type, **values)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def match_data_url(text: str) -> Optional[re.Match[str]]:
    """Match ``data:<mime>;base64,<rest>``; group 1 is the MIME type."""
    return DATA_URL_RE.match(text)
