"""Shared HTTP helpers for talking to replicas.

Architecture constraints:
    - Does not create ``httpx.AsyncClient`` instances; callers own the
      client lifetime so one connection pool is shared by a whole batch.
    - Every failure leaves this module as a :class:`TransportError`.

Helpers:
    - extract_error_message(response) -> str
    - get_json(client, endpoint, path, params) -> dict
"""

import logging
from typing import Any, Optional, Sequence, Union

import httpx

from drivefetch.core.errors import TransportError

logger = logging.getLogger(__name__)

QueryParams = Union[dict[str, Any], Sequence[tuple[str, Any]]]


def extract_error_message(response: httpx.Response) -> str:
    """Extract a short error message from an HTTP error response.

    Tries the JSON ``{"message": ...}`` / ``{"error": ...}`` shapes that
    node REST gateways return before falling back to the raw body.
    """
    try:
        data = response.json()
        if isinstance(data, dict):
            error_field = data.get("error")
            if isinstance(error_field, dict):
                return str(error_field.get("message", error_field))[:200]
            if data.get("message"):
                return str(data["message"])[:200]
            if isinstance(error_field, str):
                return error_field[:200]
        return response.text[:200] if response.text else "Unknown error"
    except Exception:
        return response.text[:200] if response.text else "Unknown error"


async def get_json(
    client: httpx.AsyncClient,
    endpoint: str,
    path: str,
    params: Optional[QueryParams] = None,
) -> Any:
    """GET ``{endpoint}{path}`` and return the decoded JSON body.

    Raises:
        TransportError: On an invalid URL, connection failure, timeout,
            non-2xx status or an unparseable body.
    """
    url = f"{endpoint}{path}"
    try:
        response = await client.get(url, params=params)
    except (httpx.RequestError, httpx.InvalidURL) as e:
        # InvalidURL is not a RequestError; a replica-served hash can carry control characters
        raise TransportError(
            endpoint=endpoint,
            message=f"Request failed: {type(e).__name__}: {e}",
            original_error=e,
        ) from e

    if not 200 <= response.status_code < 300:
        raise TransportError(
            endpoint=endpoint,
            message=f"HTTP {response.status_code}: {extract_error_message(response)}",
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        raise TransportError(
            endpoint=endpoint,
            message=f"Malformed JSON body from {path}",
            status_code=response.status_code,
            original_error=e,
        ) from e
