"""
Shared test fixtures and configuration for pytest
"""
import os
import tempfile

# Must be set before simple_storage is imported: paths and logging read them
os.environ["SIMPLE_STORAGE_HOME"] = tempfile.mkdtemp(prefix="simple_storage_home_")
os.environ["SIMPLE_STORAGE_LOG_TO_FILE"] = "false"

import sqlite3
from pathlib import Path

import pytest

from simple_storage.core.database import SimpleStorage, StorageConfig, reset_config
from simple_storage.utils.console import reset_console


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Private data directory for one test"""
    return tmp_path / "profile"


@pytest.fixture
def storage_config() -> StorageConfig:
    """Explicit configuration so tests never share the singleton"""
    return StorageConfig()


@pytest.fixture
async def storage(data_dir, storage_config):
    """SimpleStorage on a fresh data directory, closed after the test"""
    store = SimpleStorage(data_dir=data_dir, config=storage_config)
    yield store
    await store.close()


@pytest.fixture
def raw_db():
    """Open the storage file directly with sqlite3"""
    connections = []

    def _open(path: Path) -> sqlite3.Connection:
        conn = sqlite3.connect(str(path))
        connections.append(conn)
        return conn

    yield _open

    for conn in connections:
        conn.close()


@pytest.fixture(autouse=True)
def clear_env_vars():
    """Clear storage environment variables before each test"""
    env_vars = [
        'SIMPLE_STORAGE_DATA_DIR', 'SIMPLE_STORAGE_FILENAME',
        'SIMPLE_STORAGE_BUSY_TIMEOUT', 'SIMPLE_STORAGE_JOURNAL_MODE',
        'SIMPLE_STORAGE_SYNCHRONOUS', 'SIMPLE_STORAGE_SLOW_QUERY_THRESHOLD',
    ]
    original = {}
    for var in env_vars:
        original[var] = os.environ.get(var)
        if var in os.environ:
            del os.environ[var]

    reset_config()
    reset_console()

    yield

    reset_config()
    for var, value in original.items():
        if value is not None:
            os.environ[var] = value
        elif var in os.environ:
            del os.environ[var]
