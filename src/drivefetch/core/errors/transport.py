"""Transport error classes.

Raised for anything that goes wrong between the engine and a replica:
non-2xx responses, unparseable JSON bodies, timeouts and connection
failures. The Bulk Fetcher retries these; the Cursor Enumerator lets them
propagate.
"""

from typing import Optional

from drivefetch.core.errors.base import DriveFetchError


class TransportError(DriveFetchError):
    """A request to a replica failed.

    Attributes:
        endpoint: Base URL of the replica that was queried
        message: Human-readable error description
        status_code: HTTP status when the replica answered, None otherwise
        original_error: The underlying exception if available
    """

    def __init__(
        self,
        endpoint: str,
        message: str,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        self.endpoint = endpoint
        self.message = message
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(f"[{endpoint}] {message}")

    @property
    def is_not_found(self) -> bool:
        """True when the replica answered 404 (hash unknown to that replica)."""
        return self.status_code == 404
