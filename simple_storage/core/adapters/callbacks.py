"""Continuation-passing access to SimpleStorage.

Each call schedules the operation on the running event loop and returns
immediately. ``on_result`` is called exactly once with the result when the
operation succeeds. Failures are always logged. ``on_error`` is an addition
over the older callback API, which had no error continuation at all: when it
is omitted, a failed operation calls nothing.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional, Set

from simple_storage.core.database.storage import SimpleStorage
from simple_storage.utils.errors import ErrorHandler
from simple_storage.utils.logging import get_logger

logger = get_logger(__name__)

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class CallbackStorage:
    """SimpleStorage operations reporting through callbacks."""

    def __init__(self, storage: SimpleStorage) -> None:
        self.storage = storage
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of scheduled operations that have not finished."""
        return len(self._tasks)

    def get(
        self,
        table_name: str,
        key: str,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._schedule(
            "get", self.storage.get(table_name, key), on_result, on_error
        )

    def set(
        self,
        table_name: str,
        key: str,
        value: Any,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._schedule(
            "set", self.storage.set(table_name, key, value), on_result, on_error
        )

    def has(
        self,
        table_name: str,
        key: str,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._schedule(
            "has", self.storage.has(table_name, key), on_result, on_error
        )

    def remove(
        self,
        table_name: str,
        key: str,
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._schedule(
            "remove", self.storage.remove(table_name, key), on_result, on_error
        )

    async def drain(self) -> None:
        """Wait for every scheduled operation and its callbacks."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _schedule(
        self,
        operation: str,
        coro: Awaitable[Any],
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise

        task = loop.create_task(self._run(operation, coro, on_result, on_error))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        operation: str,
        coro: Awaitable[Any],
        on_result: ResultCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        try:
            result = await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:
            ErrorHandler.handle(e, context=f"SimpleStorage:{operation}", log_traceback=False)
            if on_error is not None:
                self._invoke(on_error, e, operation)
            return

        self._invoke(on_result, result, operation)

    @staticmethod
    def _invoke(callback: Callable[[Any], None], arg: Any, operation: str) -> None:
        try:
            callback(arg)
        except Exception:
            logger.exception(f"Callback for SimpleStorage:{operation} raised")
