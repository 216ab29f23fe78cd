"""Storage access layer - public API."""

from .base import create_engine, dispose_engine
from .config import StorageConfig, get_config, reset_config
from .engine_manager import EngineManager
from .schema import TableSchema, validate_table_name
from .storage import SimpleStorage, get_storage, reset_storage, resolve_storage_path
from .transaction import TransactionManager

__all__ = [
    "SimpleStorage",
    "get_storage",
    "reset_storage",
    "resolve_storage_path",
    "EngineManager",
    "TransactionManager",
    "StorageConfig",
    "get_config",
    "reset_config",
    "TableSchema",
    "validate_table_name",
    "create_engine",
    "dispose_engine",
]
