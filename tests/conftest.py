"""Shared fixtures for drivefetch tests."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from drivefetch.config import set_config
from tests.fakes import ENDPOINTS, FakeReplicaNetwork


@pytest.fixture
def endpoints():
    return list(ENDPOINTS)


@pytest.fixture
def fake_network():
    """Route every ``httpx.AsyncClient`` request to an in-memory replica network."""
    network = FakeReplicaNetwork(ENDPOINTS)
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = MagicMock()
        mock_client.get = AsyncMock(side_effect=network.get)
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        mock_client_class.return_value = mock_client
        network.client_class = mock_client_class
        yield network


@pytest.fixture
def sleep_calls():
    return []


@pytest.fixture
def fake_sleep(sleep_calls):
    """Injectable sleep that records requested delays without waiting."""

    async def _sleep(seconds: float) -> None:
        sleep_calls.append(seconds)

    return _sleep


@pytest.fixture(autouse=True)
def reset_global_config():
    set_config(None)
    yield
    set_config(None)
