"""
Core pytest configuration and fixtures for GENA testing.

This module provides shared test fixtures: fake clocks for the rate limiter,
fake generation backends, and a fully wired application with HTTP and
Socket.IO test clients.
"""

from typing import List
from unittest.mock import MagicMock

import pytest
from gena.config import Settings
from gena.models import ASSISTANT_ROLE, USER_ROLE, ConversationTurn
from gena.rate_limit import RateLimiter

# ===== CLOCK FIXTURES =====


class FakeClock:
    """A controllable replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock) -> RateLimiter:
    """Default limits (10 per 60s, hourly reset) on a fake clock."""
    return RateLimiter(clock=clock)


# ===== TEST DATA FIXTURES =====


@pytest.fixture
def sample_history() -> List[ConversationTurn]:
    """Eight alternating turns, so the oldest two fall outside the window."""
    return [
        ConversationTurn(
            role=USER_ROLE if i % 2 == 0 else ASSISTANT_ROLE, text=f"turn {i}"
        )
        for i in range(8)
    ]


@pytest.fixture
def gemini_result() -> dict:
    """A nested candidate/content/parts result as returned by Gemini."""
    return {
        "response": {
            "candidates": [{"content": {"parts": [{"text": "  Rest and hydrate.  "}]}}]
        }
    }


# ===== MOCK FIXTURES =====


@pytest.fixture
def mock_llm(gemini_result):
    """Backend that always answers with a valid result."""
    mock = MagicMock()
    mock.model = "mock-model"
    mock.complete.return_value = gemini_result
    return mock


@pytest.fixture
def settings() -> Settings:
    return Settings(provider="echo", model="echo-v1")


# ===== APP FIXTURES =====


@pytest.fixture
def test_app(mock_llm, limiter, settings):
    """
    Provides a Gena app with a mock backend and a fake-clock limiter.

    Ideal for integration tests: no network, deterministic admission.
    """
    from gena import Gena

    return Gena(llm=mock_llm, limiter=limiter, settings=settings)


@pytest.fixture
def client(test_app):
    """Flask test client for the HTTP endpoints."""
    test_app.server.config["TESTING"] = True
    return test_app.server.test_client()


@pytest.fixture
def socket_client(test_app):
    """Socket.IO test client, connected."""
    socket = test_app.socketio.test_client(test_app.server)
    yield socket
    if socket.is_connected():
        socket.disconnect()


# ===== CONFIGURATION =====


def pytest_configure(config):
    """Pytest configuration."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
