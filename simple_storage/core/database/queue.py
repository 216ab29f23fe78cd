"""Per-table operation ordering and the shutdown write barrier."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict

from simple_storage.utils.logging import get_logger

logger = get_logger(__name__)


class TableQueue:
    """Serialises operations per table and tracks in-flight writes.

    Every operation on a table runs inside that table's slot. The slot is an
    ``asyncio.Lock``, whose waiters are woken first-in first-out, so
    operations issued against the same table complete in issue order. Slots
    of different tables never wait on each other. A table's lock is dropped
    once no operation holds or waits for it.

    Writes are counted from the moment they are issued, including time spent
    waiting for the slot. ``drain()`` returns once the count reaches zero.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}
        self._pending_writes = 0
        self._idle = asyncio.Event()
        self._idle.set()

    @property
    def pending_writes(self) -> int:
        return self._pending_writes

    @asynccontextmanager
    async def slot(self, table: str, write: bool = False) -> AsyncIterator[None]:
        """Hold the table's slot for the duration of the block."""
        lock = self._locks.setdefault(table, asyncio.Lock())
        self._users[table] = self._users.get(table, 0) + 1

        if write:
            self._pending_writes += 1
            self._idle.clear()

        try:
            async with lock:
                yield
        finally:
            # Drop the lock once nobody holds or waits for it
            self._users[table] -= 1
            if not self._users[table]:
                del self._users[table]
                del self._locks[table]

            if write:
                self._pending_writes -= 1
                if self._pending_writes == 0:
                    self._idle.set()

    async def drain(self) -> None:
        """Wait until no write is queued or running."""
        if self._pending_writes:
            logger.debug(f"Waiting for {self._pending_writes} pending write(s)")
        await self._idle.wait()
