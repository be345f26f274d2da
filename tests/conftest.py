"""Pytest configuration and shared fixtures.

Every test gets its own SQLite file under ``tmp_path`` so stores,
services and servers never share state.
"""

import sqlite3

import pytest
import pytest_asyncio

from school_registry.app.api.router import RequestRouter
from school_registry.app.core.config import Settings
from school_registry.app.core.db import init_db
from school_registry.app.main import create_server
from school_registry.app.services.enrollment_service import EnrollmentService
from school_registry.app.services.store import EntityStore
from school_registry.client import RegistryClient


@pytest.fixture
def db_path(tmp_path):
    """Path to a freshly initialised database."""
    path = str(tmp_path / "registry.db")
    init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return EntityStore(db_path)


@pytest.fixture
def service(store):
    return EnrollmentService(store)


@pytest.fixture
def router(service):
    return RequestRouter(service)


@pytest.fixture
def count_rows(db_path):
    """Return a helper counting the rows of a table."""

    def _count(table: str) -> int:
        conn = sqlite3.connect(db_path)
        try:
            return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]
        finally:
            conn.close()

    return _count


@pytest.fixture
def server_settings(tmp_path):
    return Settings(
        host="127.0.0.1",
        port=0,
        database_url=str(tmp_path / "server.db"),
        max_frame_bytes=1024,
        log_level="DEBUG",
    )


@pytest_asyncio.fixture
async def server(server_settings):
    registry = create_server(server_settings)
    await registry.start()
    yield registry
    await registry.stop()


@pytest_asyncio.fixture
async def client(server):
    async with RegistryClient("127.0.0.1", server.port) as registry_client:
        yield registry_client
