"""Base database infrastructure with SQLAlchemy async engine."""

from pathlib import Path
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool

from simple_storage.core.database.config import StorageConfig, get_config
from simple_storage.utils.logging import get_logger

logger = get_logger(__name__)


def create_engine(
    db_path: Path,
    config: Optional[StorageConfig] = None,
    echo: bool = False,
) -> AsyncEngine:
    """Create async SQLAlchemy engine holding a single connection.

    Args:
        db_path: Path to SQLite database file
        config: Storage configuration (uses singleton if None)
        echo: Enable SQL query logging (for debugging)

    Returns:
        Configured async engine
    """
    if config is None:
        config = get_config()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    url = f"sqlite+aiosqlite:///{db_path}"

    engine = create_async_engine(
        url,
        echo=echo,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=1,
        max_overflow=0,
        connect_args={
            "timeout": config.busy_timeout,
            "check_same_thread": False,  # Required for async
        },
    )

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        """Set SQLite pragmas for every new DBAPI connection."""
        cursor = dbapi_conn.cursor()
        cursor.execute(f"PRAGMA journal_mode={config.journal_mode}")
        cursor.execute(f"PRAGMA synchronous={config.synchronous}")
        cursor.execute(f"PRAGMA busy_timeout={int(config.busy_timeout * 1000)}")
        cursor.close()

    logger.debug(f"Storage engine created: {db_path} (journal_mode={config.journal_mode})")

    return engine


async def dispose_engine(engine: AsyncEngine) -> None:
    """Dispose of engine and close all connections.

    Args:
        engine: Engine to dispose
    """
    await engine.dispose()
    logger.debug("Storage engine disposed")
