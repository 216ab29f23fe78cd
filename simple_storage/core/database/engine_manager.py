"""Engine manager owning the single connection to the backing store."""

import asyncio
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import Table, inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from simple_storage.core.database.base import create_engine, dispose_engine
from simple_storage.core.database.config import StorageConfig, get_config
from simple_storage.core.database.models import get_table
from simple_storage.core.database.schema import TableSchema
from simple_storage.utils.errors import QueryFailureError, StorageUnavailableError
from simple_storage.utils.logging import get_logger, log_event

logger = get_logger(__name__)


class EngineManager:
    """Manages the engine and the one connection every table shares.

    The connection is opened lazily and handed out exclusively through
    ``acquire()``/``release()`` (or the ``connection()`` context manager).
    Tables are created on first use by ``ensure_table()``.
    """

    def __init__(
        self,
        db_path: Path,
        config: Optional[StorageConfig] = None,
        echo: Optional[bool] = None,
    ) -> None:
        """Initialise engine manager.

        Args:
            db_path: Path to SQLite database file
            config: Storage configuration (uses singleton if None)
            echo: Enable SQL logging (falls back to config.echo if None)
        """
        self.db_path = Path(db_path)
        self.config = config or get_config()
        self.echo = self.config.echo if echo is None else echo

        self._engine: Optional[AsyncEngine] = None
        self._connection: Optional[AsyncConnection] = None
        self._lock = asyncio.Lock()
        self._tables: Dict[str, Table] = {}
        self._last_health_check: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    async def open(self) -> None:
        """Open the connection if it is not open yet.

        Raises:
            StorageUnavailableError: If the store cannot be opened
        """
        async with self._lock:
            await self._ensure_open()

    async def _ensure_open(self) -> AsyncConnection:
        """Open engine and connection; caller holds the lock."""
        if self._connection is not None:
            return self._connection

        connection: Optional[AsyncConnection] = None
        try:
            self._engine = create_engine(self.db_path, config=self.config, echo=self.echo)
            connection = await self._engine.connect()

            # Fails on files that are not SQLite databases
            await connection.execute(text("SELECT count(*) FROM sqlite_master"))
            await connection.rollback()

        except Exception as e:
            if connection is not None:
                try:
                    await connection.close()
                except Exception as close_error:
                    logger.debug(f"Error closing failed connection: {close_error}")

            if self._engine is not None:
                try:
                    await dispose_engine(self._engine)
                except Exception as dispose_error:
                    logger.debug(f"Error disposing failed engine: {dispose_error}")
                self._engine = None

            logger.error(f"Failed to open storage at {self.db_path}: {e}")
            raise StorageUnavailableError(
                "Failed to open the storage file",
                details={"db_path": str(self.db_path), "error": str(e)},
            ) from e

        self._connection = connection
        log_event("storage_opened", f"Storage opened: {self.db_path}", db_path=str(self.db_path))
        return connection

    async def acquire(self) -> AsyncConnection:
        """Take exclusive use of the connection, opening it if needed.

        Every successful call must be paired with ``release()``.
        """
        await self._lock.acquire()
        try:
            return await self._ensure_open()
        except BaseException:
            self._lock.release()
            raise

    def release(self) -> None:
        """Give back the connection taken by ``acquire()``."""
        self._lock.release()

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[AsyncConnection]:
        """Exclusive use of the connection for the duration of the block.

        Usage:
            async with manager.connection() as conn:
                result = await conn.execute(query)
        """
        conn = await self.acquire()
        try:
            yield conn
        finally:
            self.release()

    async def ensure_table(self, name: str) -> Table:
        """Create the named table if it does not exist yet.

        Returns:
            SQLAlchemy Table for the name

        Raises:
            InvalidTableError: If the name cannot be used
            StorageUnavailableError: If the store cannot be opened
            QueryFailureError: If the existence check or DDL fails
        """
        table = get_table(name)

        if name in self._tables:
            return self._tables[name]

        async with self.connection() as conn:
            # Another caller may have finished while we waited
            if name in self._tables:
                return self._tables[name]

            schema = TableSchema(name)
            try:
                exists = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table(name)
                )
                if not exists:
                    await conn.exec_driver_sql(schema.create_table_sql())
                await conn.commit()

            except SQLAlchemyError as e:
                await self._safe_rollback(conn)
                logger.error(f"Failed to ensure table {name!r}: {e}")
                raise QueryFailureError(
                    "Failed to create table",
                    details={"table": name, "error": str(e)},
                ) from e

            if not exists:
                log_event("table_created", f"Created table {name!r}", table=name)

            self._tables[name] = table

        return table

    async def close(self) -> None:
        """Close the connection and dispose of the engine (no-op if closed)."""
        async with self._lock:
            if self._connection is None and self._engine is None:
                return

            try:
                if self._connection is not None:
                    await self._connection.close()
            except Exception as e:
                logger.debug(f"Error closing connection: {e}")
            finally:
                self._connection = None

            try:
                if self._engine is not None:
                    await dispose_engine(self._engine)
            except Exception as e:
                logger.error(f"Error disposing engine: {e}")
            finally:
                self._engine = None
                self._tables.clear()

            log_event("storage_closed", f"Storage closed: {self.db_path}", db_path=str(self.db_path))

    @staticmethod
    async def _safe_rollback(conn: AsyncConnection) -> None:
        try:
            await conn.rollback()
        except Exception as e:
            logger.debug(f"Rollback failed: {e}")

    async def health_check(self) -> bool:
        """Perform database health check.

        Returns:
            True if healthy, False otherwise
        """
        try:
            async with self.connection() as conn:
                result = await conn.execute(text("SELECT 1"))
                row = result.fetchone()
                await conn.rollback()
            healthy = row is not None and row[0] == 1

        except (StorageUnavailableError, SQLAlchemyError) as e:
            logger.error(f"Storage health check failed: {e}")
            healthy = False

        self._last_health_check = time.time()

        if healthy:
            logger.debug("Storage health check: OK")
        else:
            logger.warning("Storage health check: FAILED")

        return healthy

    async def get_stats(self) -> Dict[str, Any]:
        """Get storage file and connection statistics.

        Returns:
            Dictionary with storage metrics
        """
        stats: Dict[str, Any] = {
            "database_path": str(self.db_path),
            "connected": self.is_open,
            "database_size_bytes": self.db_path.stat().st_size if self.db_path.exists() else 0,
            "last_health_check": self._last_health_check,
        }

        async with self.connection() as conn:
            try:
                page_count = (await conn.execute(text("PRAGMA page_count"))).scalar()
                page_size = (await conn.execute(text("PRAGMA page_size"))).scalar()
                journal_mode = (await conn.execute(text("PRAGMA journal_mode"))).scalar()
                tables = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names()
                )
                await conn.rollback()

            except SQLAlchemyError as e:
                await self._safe_rollback(conn)
                raise QueryFailureError(
                    "Failed to read storage statistics",
                    details={"db_path": str(self.db_path), "error": str(e)},
                ) from e

        stats.update({
            "connected": True,
            "page_count": page_count,
            "page_size": page_size,
            "journal_mode": journal_mode,
            "estimated_size": page_count * page_size,
            "tables": sorted(tables),
        })
        return stats

    # Context manager support
    async def __aenter__(self) -> "EngineManager":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        await self.close()
        return False
