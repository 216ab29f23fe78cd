"""Transaction manager over the shared storage connection."""

import time
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from simple_storage.core.database.engine_manager import EngineManager
from simple_storage.utils.errors import QueryFailureError
from simple_storage.utils.logging import get_logger

logger = get_logger(__name__)


class TransactionManager:
    """Runs one unit of work on the shared connection.

    Provides:
    - Exclusive use of the connection for the block
    - Commit on success, rollback on error or cancellation
    - SQLAlchemy errors surfaced as QueryFailureError with query context
    - Slow transaction logging
    """

    def __init__(
        self,
        engine_manager: EngineManager,
        context: Optional[Dict[str, Any]] = None,
        readonly: bool = False,
    ):
        """Initialise transaction manager.

        Args:
            engine_manager: Owner of the shared connection
            context: Query context (table, key, operation) attached to errors
            readonly: Always roll back instead of committing
        """
        self.engine_manager = engine_manager
        self.config = engine_manager.config
        self.context = context or {}
        self.readonly = readonly

        self._connection: Optional[AsyncConnection] = None
        self._start_time: Optional[float] = None

    async def __aenter__(self) -> "TransactionManager":
        """Acquire the connection and begin a transaction."""
        self._connection = await self.engine_manager.acquire()
        self._start_time = time.time()

        try:
            await self._connection.begin()
        except SQLAlchemyError as e:
            self._connection = None
            self.engine_manager.release()
            raise self._failure("Failed to start transaction", e) from e

        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Commit or roll back, then release the connection."""
        duration = time.time() - self._start_time if self._start_time else 0
        conn = self._connection

        try:
            if exc_type is not None or self.readonly:
                await self._rollback(conn)
                if exc_type is not None:
                    logger.debug(
                        f"Transaction rolled back due to {exc_type.__name__} "
                        f"(duration={duration:.3f}s)"
                    )
                if isinstance(exc_val, SQLAlchemyError):
                    raise self._failure("Storage query failed", exc_val) from exc_val
                return False

            try:
                await conn.commit()
            except SQLAlchemyError as e:
                await self._rollback(conn)
                raise self._failure("Failed to commit transaction", e) from e

            if self.config.log_slow_queries and duration > self.config.slow_query_threshold:
                logger.warning(
                    f"Slow transaction: {duration:.2f}s "
                    f"(threshold={self.config.slow_query_threshold}s, context={self.context})"
                )
            return False

        finally:
            self._connection = None
            self.engine_manager.release()

    @property
    def connection(self) -> AsyncConnection:
        """Get the transaction's connection.

        Raises:
            RuntimeError: If accessed outside transaction context
        """
        if not self._connection:
            raise RuntimeError("Connection only available within transaction context")

        return self._connection

    async def _rollback(self, conn: AsyncConnection) -> None:
        try:
            await conn.rollback()
        except Exception as e:
            logger.debug(f"Rollback failed: {e}")

    def _failure(self, message: str, error: BaseException) -> QueryFailureError:
        details = dict(self.context, error=str(error))
        logger.error(f"{message}: {error}", extra={"context": details})
        return QueryFailureError(message, details=details)
