"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import pytest

from glazewm_ipc.config import DISABLE_AUTO_CONNECT_ENV, ClientOptions
from glazewm_ipc.sdk.client import WmClient
from glazewm_ipc.transport.mock import MockTransport


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the auto-connect toggle from leaking in from the environment."""
    monkeypatch.delenv(DISABLE_AUTO_CONNECT_ENV, raising=False)


@pytest.fixture
def options() -> ClientOptions:
    return ClientOptions(timeout=1.0, auto_connect=False)


@pytest.fixture
def mock_transport() -> MockTransport:
    return MockTransport()


@pytest.fixture
def client(options: ClientOptions, mock_transport: MockTransport) -> WmClient:
    """Client wired to a mock transport, not yet connected."""
    return WmClient(options, transport=mock_transport, process_check=lambda: True)
