"""Parsing helpers for configuration values."""

import logging
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_csv(value: Any) -> List[str]:
    """Split a comma-separated string (or pass a list through), dropping blanks."""
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = str(value).split(",")
    return [item.strip() for item in items if item and item.strip()]


def _try_parse_int(value: Any, *, name: str) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring %s: expected an integer, got %r", name, value)
        return None


def _try_parse_float(value: Any, *, name: str) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring %s: expected a number, got %r", name, value)
        return None
