"""Progress publisher for the fetch pipeline.

One ``ProgressPublisher`` belongs to one ``DriveFetcher``. The pipeline
writes to it; external callers read copies via :meth:`snapshot`. Every
mutation and the copy it returns happen under a single lock, so concurrent
worker completions cannot lose an increment and a reader never sees a
half-written state.
"""

import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class FetchPhase(str, Enum):
    """Pipeline phases in the order they are entered."""

    IDLE = "idle"
    FETCHING_LIST = "fetching-list"
    FETCHING_DETAILS = "fetching-details"
    PROCESSING = "processing"
    COMPLETE = "complete"


@dataclass
class ProgressSnapshot:
    """Point-in-time view of pipeline progress.

    Attributes:
        phase: Current pipeline phase
        current_step: Completed units of work in this phase
        total_steps: Expected units of work in this phase (0 if unknown)
        percentage: ``current_step / total_steps * 100`` rounded to 2 places
        message: Last status or failure message
        details: ``{"fetched": n, "total": m}`` counters for the fetch phase
    """

    phase: FetchPhase = FetchPhase.IDLE
    current_step: int = 0
    total_steps: int = 0
    percentage: float = 0.0
    message: str = ""
    details: dict[str, int] = field(default_factory=lambda: {"fetched": 0, "total": 0})

    def copy(self) -> "ProgressSnapshot":
        return replace(self, details=dict(self.details))


class ProgressPublisher:
    """Mutable progress record with atomic increment-and-snapshot.

    Example:
        >>> progress = ProgressPublisher()
        >>> progress.begin(FetchPhase.FETCHING_DETAILS, total_steps=2)
        >>> progress.advance().percentage
        50.0
    """

    def __init__(self) -> None:
        self._state = ProgressSnapshot()
        self._lock = threading.Lock()

    def snapshot(self) -> ProgressSnapshot:
        """Return a copy of the current state."""
        with self._lock:
            return self._state.copy()

    def reset(self) -> ProgressSnapshot:
        """Return to ``idle`` with all counters cleared."""
        with self._lock:
            self._state = ProgressSnapshot()
            return self._state.copy()

    def begin(
        self,
        phase: FetchPhase,
        total_steps: int = 0,
        message: str = "",
    ) -> ProgressSnapshot:
        """Enter ``phase`` with fresh counters."""
        with self._lock:
            self._state = ProgressSnapshot(
                phase=phase,
                total_steps=max(total_steps, 0),
                message=message,
                details={"fetched": 0, "total": max(total_steps, 0)},
            )
            logger.debug("Progress phase -> %s (%d steps)", phase.value, total_steps)
            return self._state.copy()

    def advance(self, steps: int = 1, message: Optional[str] = None) -> ProgressSnapshot:
        """Atomically add ``steps`` completed units and return the new state.

        ``current_step`` never decreases and never exceeds ``total_steps``
        when a total is known.
        """
        with self._lock:
            state = self._state
            current = state.current_step + max(steps, 0)
            if state.total_steps:
                current = min(current, state.total_steps)
            state.current_step = current
            state.percentage = self._percentage(current, state.total_steps)
            state.details["fetched"] = current
            if message is not None:
                state.message = message
            return state.copy()

    def set_message(self, message: str) -> ProgressSnapshot:
        """Replace the status message without touching phase or counters."""
        with self._lock:
            self._state.message = message
            return self._state.copy()

    def complete(self, message: str = "") -> ProgressSnapshot:
        """Enter ``complete`` at 100%."""
        with self._lock:
            state = self._state
            state.phase = FetchPhase.COMPLETE
            state.current_step = state.total_steps
            state.percentage = 100.0
            state.message = message
            return state.copy()

    @staticmethod
    def _percentage(current: int, total: int) -> float:
        if total <= 0:
            return 0.0
        return round(current / total * 100, 2)
