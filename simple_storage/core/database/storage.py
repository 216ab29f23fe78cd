"""Key/value access to named tables in the backing store."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, Union

from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncConnection

from simple_storage.utils.errors import DataIntegrityError, InvalidKeyError
from simple_storage.utils.logging import async_log_call, get_logger
from simple_storage.utils.paths import DATA_DIR

from .config import StorageConfig, get_config
from .engine_manager import EngineManager
from .query import QueryBuilder
from .queue import TableQueue
from .schema import validate_table_name
from .transaction import TransactionManager
from .utils import decode_value, encode_value

if TYPE_CHECKING:
    from simple_storage.core.adapters.table_view import TableView

logger = get_logger(__name__)

DataDir = Union[str, Path, Callable[[], Union[str, Path]]]


def resolve_storage_path(
    data_dir: Optional[DataDir] = None, config: Optional[StorageConfig] = None
) -> Path:
    """Work out where the storage file lives.

    Args:
        data_dir: Directory, or a zero-argument callable returning one
        config: Storage configuration (uses singleton if None)

    Returns:
        Full path of the SQLite file
    """
    config = config or get_config()

    if callable(data_dir):
        data_dir = data_dir()
    if data_dir is None:
        data_dir = config.data_dir or DATA_DIR

    return Path(data_dir).expanduser() / config.filename


class SimpleStorage:
    """get/set/has/remove over named tables sharing one connection.

    All four operations open the connection and create the table on first
    use, so no setup call is required. Operations on one table run one at a
    time in issue order. ``close()`` waits for queued writes first.

    Usage:
        async with SimpleStorage(data_dir=profile_dir) as storage:
            added = await storage.set("prefs", "theme", {"dark": True})
            theme = await storage.get("prefs", "theme")
    """

    def __init__(
        self,
        engine_manager: Optional[EngineManager] = None,
        *,
        data_dir: Optional[DataDir] = None,
        config: Optional[StorageConfig] = None,
    ) -> None:
        if engine_manager is None:
            config = config or get_config()
            engine_manager = EngineManager(resolve_storage_path(data_dir, config), config)

        self.engine_mgr = engine_manager
        self._queue = TableQueue()
        self._query_builder = QueryBuilder()

    @property
    def db_path(self) -> Path:
        return self.engine_mgr.db_path

    ## Lifecycle

    async def open_connection(self) -> None:
        """Open the backing store (idempotent)."""
        await self.engine_mgr.open()

    async def close(self) -> None:
        """Wait for pending writes, then close the backing store."""
        await self._queue.drain()
        await self.engine_mgr.close()

    async def __aenter__(self) -> "SimpleStorage":
        await self.open_connection()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False

    def table(self, table_name: str) -> "TableView":
        """Bind to one table (see TableView)."""
        from simple_storage.core.adapters.table_view import TableView

        return TableView(self, table_name)

    ## Operations

    @async_log_call
    async def get(self, table_name: str, key: str) -> Any:
        """Return the value stored under key, or None if there is none.

        A stored JSON null also comes back as None; use has() to tell the
        two apart.

        Raises:
            DataIntegrityError: If the key matches several rows or the
                stored text is not a value wrapper
        """
        self._check_args(table_name, key)

        async with self._queue.slot(table_name):
            table = await self.engine_mgr.ensure_table(table_name)
            context = {"operation": "get", "table": table_name, "key": key}

            async with TransactionManager(self.engine_mgr, context, readonly=True) as tx:
                found, raw = await self._fetch(tx.connection, table, key)

        return decode_value(raw) if found else None

    @async_log_call
    async def set(self, table_name: str, key: str, value: Any) -> bool:
        """Store value under key.

        Returns:
            True if the key was newly added, False if it was updated in place

        Raises:
            InvalidValueError: If value cannot be serialised to JSON
        """
        self._check_args(table_name, key)
        raw = encode_value(value)

        async with self._queue.slot(table_name, write=True):
            table = await self.engine_mgr.ensure_table(table_name)
            context = {"operation": "set", "table": table_name, "key": key}

            async with TransactionManager(self.engine_mgr, context) as tx:
                if await self._exists(tx.connection, table, key):
                    await tx.connection.execute(
                        self._query_builder.update_value(table, key, raw)
                    )
                    added = False
                else:
                    await tx.connection.execute(
                        self._query_builder.insert_value(table, key, raw)
                    )
                    added = True

        logger.debug(f"{'Added' if added else 'Updated'} {table_name}[{key!r}]")
        return added

    @async_log_call
    async def has(self, table_name: str, key: str) -> bool:
        """Return True if a row exists for key, even one holding null."""
        self._check_args(table_name, key)

        async with self._queue.slot(table_name):
            table = await self.engine_mgr.ensure_table(table_name)
            context = {"operation": "has", "table": table_name, "key": key}

            async with TransactionManager(self.engine_mgr, context, readonly=True) as tx:
                return await self._exists(tx.connection, table, key)

    @async_log_call
    async def remove(self, table_name: str, key: str) -> bool:
        """Delete key from the table.

        Returns:
            True if a row was deleted, False if the key was absent
        """
        self._check_args(table_name, key)

        async with self._queue.slot(table_name, write=True):
            table = await self.engine_mgr.ensure_table(table_name)
            context = {"operation": "remove", "table": table_name, "key": key}

            async with TransactionManager(self.engine_mgr, context) as tx:
                if not await self._exists(tx.connection, table, key):
                    return False

                await tx.connection.execute(self._query_builder.delete_key(table, key))

        logger.debug(f"Removed {table_name}[{key!r}]")
        return True

    ## Helpers

    @staticmethod
    def _check_args(table_name: Any, key: Any) -> None:
        validate_table_name(table_name)
        if not isinstance(key, str):
            raise InvalidKeyError(details={"key_type": type(key).__name__})

    async def _fetch(
        self, conn: AsyncConnection, table: Table, key: str
    ) -> Tuple[bool, Optional[str]]:
        """Look up the raw stored text for key."""
        result = await conn.execute(self._query_builder.select_value(table, key))
        rows = result.fetchall()

        if len(rows) > 1:
            logger.critical(
                f"Assertion failed: {len(rows)} rows for primary key {key!r} in {table.name!r}"
            )
            raise DataIntegrityError(
                "Multiple rows for the same primary key",
                details={"table": table.name, "key": key, "rows": len(rows)},
            )

        if not rows:
            return False, None

        return True, rows[0][0]

    async def _exists(self, conn: AsyncConnection, table: Table, key: str) -> bool:
        result = await conn.execute(self._query_builder.key_exists(table, key))
        return result.first() is not None


## Process-wide default instance

_storage: Optional[SimpleStorage] = None


def get_storage(data_dir: Optional[DataDir] = None) -> SimpleStorage:
    """Get or create the process-wide SimpleStorage.

    ``data_dir`` is only honoured when the instance is first created.
    """
    global _storage
    if _storage is None:
        _storage = SimpleStorage(data_dir=data_dir)

    return _storage


async def reset_storage() -> None:
    """Close and forget the process-wide SimpleStorage."""
    global _storage
    if _storage is not None:
        await _storage.close()
        _storage = None
