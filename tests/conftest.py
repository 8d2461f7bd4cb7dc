"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import asyncio
import logging

import pytest

from basable.connectors.base import BaseConnection, TableSummary, describe
from basable.models.config import ConnectionConfig, SourceKind, SourceType

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires a live MySQL server)",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """
    Configure logging for tests.

    Sets up log capture and configures log levels.
    This fixture runs automatically for all tests.
    """
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def auth_secret(monkeypatch):
    """
    Pin the session signing secret and reload settings around each test.

    Runs automatically for all tests.
    """
    from basable.config import clear_settings_cache

    clear_settings_cache()
    monkeypatch.setenv("BASABLE_ENV_SOURCE", "environment")
    monkeypatch.setenv("AUTH_JWT_SECRET", "test-secret-0123456789")
    monkeypatch.delenv("REMOTE_BASE_URL", raising=False)
    yield "test-secret-0123456789"
    clear_settings_cache()


# ============================================================================
# Timing Helpers
# ============================================================================


@pytest.fixture
def assert_timing():
    """
    Helper for asserting execution time bounds.

    Usage:
        def test_performance(assert_timing):
            with assert_timing(min_ms=100, max_ms=500):
                # Code that should take 100-500ms
                time.sleep(0.2)
    """
    import time
    from contextlib import contextmanager

    @contextmanager
    def _assert_timing(min_ms: float = 0, max_ms: float = float("inf")):
        start = time.perf_counter()
        yield
        duration_ms = (time.perf_counter() - start) * 1000

        assert duration_ms >= min_ms, f"Execution too fast: {duration_ms:.2f}ms < {min_ms}ms"
        assert duration_ms <= max_ms, f"Execution too slow: {duration_ms:.2f}ms > {max_ms}ms"

    return _assert_timing


# ============================================================================
# In-Memory Driver
# ============================================================================


class FakeConnection(BaseConnection):
    """
    Driver backed by a list of table names.

    Records how many calls overlap so tests can check that access through a
    SharedConnection is serialized.
    """

    driver_name = "fake"

    def __init__(
        self, config, remote_store=None, tables=None, delay=0.0, connect_delay=0.0, **kwargs
    ):
        super().__init__(config, remote_store=remote_store)
        self.tables = list(tables or [])
        self.delay = delay
        self.connect_delay = connect_delay
        self.active_calls = 0
        self.max_active_calls = 0
        self.closed = False

    async def _track(self):
        self.active_calls += 1
        self.max_active_calls = max(self.max_active_calls, self.active_calls)
        try:
            await asyncio.sleep(self.delay)
        finally:
            self.active_calls -= 1

    async def connect(self):
        await asyncio.sleep(self.connect_delay)
        self._connected = True

    async def details(self):
        self._require_connected()
        await self._track()
        return describe(self, server_version="fake-1.0")

    async def load_tables(self):
        self._require_connected()
        await self._track()
        return [TableSummary(name=name, row_count=0, col_count=1) for name in self.tables]

    async def table_exists(self, name):
        self._require_connected()
        await self._track()
        return name in self.tables

    async def close(self):
        self.closed = True
        self._connected = False


@pytest.fixture
def database_config():
    """Factory for database configs."""

    def _create(variant="mysql", **overrides):
        values = {
            "source": SourceType.database(variant),
            "host": "db.local",
            "port": 3306,
            "database": "shop",
            "user": "root",
            "password": "secret",
        }
        values.update(overrides)
        return ConnectionConfig(**values)

    return _create


@pytest.fixture
def file_config():
    return ConnectionConfig(source=SourceType(kind=SourceKind.FILE))


@pytest.fixture
def fake_connection(database_config):
    """
    Factory for connected in-memory drivers.

    Usage:
        async def test_something(fake_connection):
            conn = await fake_connection(tables=["users"])
    """

    async def _create(tables=None, delay=0.0, remote_store=None, **config_overrides):
        conn = FakeConnection(
            database_config(**config_overrides),
            remote_store=remote_store,
            tables=tables,
            delay=delay,
        )
        await conn.connect()
        return conn

    return _create


@pytest.fixture
def fake_driver():
    """The in-memory driver class, for patching the connector factory."""
    return FakeConnection
