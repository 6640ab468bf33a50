"""
Pytest configuration and shared fixtures for all tests.

Nothing here opens a window or a socket: the HTTP layer is replaced by
``FakeHttp`` (scripted responses, recorded calls) and Tk timers by
``FakeScheduler`` (manual clock).
"""

from __future__ import annotations

import io

import pytest
import requests

from superhub.config import AppConfig
from superhub.logger import StructuredLogger
from superhub.services import create_services
from superhub.session_store import SessionStore
from tests.fakes import FakeHttp, FakeScheduler, MemoryStorage


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    """Logger writing to an in-memory stream and a temp file."""
    return StructuredLogger(
        name="superhub.tests",
        stream=io.StringIO(),
        log_file=str(tmp_path / "test.log"),
    )


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        API_BASE_URL="http://backend.test/api",
        API_TIMEOUT_S=5.0,
        RESEND_COOLDOWN_S=60,
    )


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def http() -> FakeHttp:
    return FakeHttp()


@pytest.fixture
def session_store(storage, logger) -> SessionStore:
    store = SessionStore(storage, "token", logger)
    store.init()
    return store


@pytest.fixture
def services(config, session_store, http):
    return create_services(config=config, session_store=session_store, http=http)


@pytest.fixture
def api_client(services):
    return services["api_client"]


@pytest.fixture
def auth_service(services):
    return services["auth_service"]


@pytest.fixture
def connection_error() -> requests.ConnectionError:
    return requests.ConnectionError("connection refused")
