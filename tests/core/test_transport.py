"""Tests for the shared replica HTTP helpers."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from drivefetch.core.errors import TransportError
from drivefetch.core.transport import extract_error_message, get_json
from tests.fakes import make_mock_response

ENDPOINT = "https://node-a.example:3001"


def _client(response=None, side_effect=None):
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=side_effect)
    return client


class TestExtractErrorMessage:
    def test_message_field(self):
        response = make_mock_response(404, {"code": "ResourceNotFound", "message": "no resource"})
        assert extract_error_message(response) == "no resource"

    def test_nested_error_object(self):
        response = make_mock_response(500, {"error": {"message": "internal failure"}})
        assert extract_error_message(response) == "internal failure"

    def test_falls_back_to_text(self):
        response = make_mock_response(502, ValueError("not json"), text="Bad Gateway")
        assert extract_error_message(response) == "Bad Gateway"

    def test_truncates_long_text(self):
        response = make_mock_response(502, ValueError("not json"), text="x" * 500)
        assert len(extract_error_message(response)) == 200


class TestGetJson:
    @pytest.mark.asyncio
    async def test_returns_decoded_body(self):
        client = _client(make_mock_response(200, {"data": []}))
        body = await get_json(client, ENDPOINT, "/records/confirmed", [("pageSize", 10)])
        assert body == {"data": []}
        client.get.assert_awaited_once_with(
            f"{ENDPOINT}/records/confirmed", params=[("pageSize", 10)]
        )

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status(self):
        client = _client(make_mock_response(404, {"message": "no resource exists"}))
        with pytest.raises(TransportError) as exc_info:
            await get_json(client, ENDPOINT, "/records/confirmed/ABC")
        error = exc_info.value
        assert error.status_code == 404
        assert error.is_not_found
        assert error.endpoint == ENDPOINT
        assert "HTTP 404" in str(error)
        assert str(error).startswith(f"[{ENDPOINT}]")

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self):
        cause = httpx.ConnectError("connection refused")
        client = _client(side_effect=cause)
        with pytest.raises(TransportError) as exc_info:
            await get_json(client, ENDPOINT, "/records/confirmed")
        assert exc_info.value.status_code is None
        assert exc_info.value.original_error is cause

    @pytest.mark.asyncio
    async def test_timeout_wrapped(self):
        client = _client(side_effect=httpx.ReadTimeout("timed out"))
        with pytest.raises(TransportError, match="ReadTimeout"):
            await get_json(client, ENDPOINT, "/records/confirmed")

    @pytest.mark.asyncio
    async def test_invalid_url_wrapped(self):
        cause = httpx.InvalidURL("Invalid non-printable ASCII character in URL")
        client = _client(side_effect=cause)
        with pytest.raises(TransportError, match="InvalidURL") as exc_info:
            await get_json(client, ENDPOINT, "/records/confirmed/BAD\nHASH")
        assert exc_info.value.original_error is cause

    @pytest.mark.asyncio
    async def test_malformed_json_raises(self):
        client = _client(make_mock_response(200, ValueError("Expecting value"), text="<html>"))
        with pytest.raises(TransportError, match="Malformed JSON"):
            await get_json(client, ENDPOINT, "/records/confirmed")
