"""SimpleStorage: JSON key/value tables in a single SQLite file."""

from simple_storage.core.adapters import CallbackStorage, TableView
from simple_storage.core.database import (
    EngineManager,
    SimpleStorage,
    StorageConfig,
    get_storage,
    reset_storage,
)
from simple_storage.utils.errors import (
    DataIntegrityError,
    InvalidKeyError,
    InvalidTableError,
    InvalidValueError,
    QueryFailureError,
    StorageError,
    StorageUnavailableError,
)

__version__ = "0.1.0"

__all__ = [
    "SimpleStorage",
    "TableView",
    "CallbackStorage",
    "EngineManager",
    "StorageConfig",
    "get_storage",
    "reset_storage",
    "StorageError",
    "StorageUnavailableError",
    "DataIntegrityError",
    "QueryFailureError",
    "InvalidTableError",
    "InvalidKeyError",
    "InvalidValueError",
]
