"""Tests for per-table ordering and the shutdown write barrier."""

import asyncio

import pytest

from simple_storage.core.database.queue import TableQueue


class TestIssueOrder:
    """Operations on one table complete in the order they were issued"""

    @pytest.mark.asyncio
    async def test_concurrent_sets_same_key(self, storage):
        results = await asyncio.gather(
            *(storage.set("test", "counter", i) for i in range(20))
        )

        assert results == [True] + [False] * 19
        assert await storage.get("test", "counter") == 19

    @pytest.mark.asyncio
    async def test_mixed_operations_in_order(self, storage):
        results = await asyncio.gather(
            storage.set("test", "k", 1),
            storage.get("test", "k"),
            storage.remove("test", "k"),
            storage.get("test", "k"),
            storage.has("test", "k"),
        )

        assert results == [True, 1, True, None, False]

    @pytest.mark.asyncio
    async def test_failed_operation_does_not_block_queue(self, storage):
        results = await asyncio.gather(
            storage.set("test", "k", "a"),
            storage.set("test", "k", object()),
            storage.get("test", "k"),
            return_exceptions=True,
        )

        assert results[0] is True
        assert isinstance(results[1], Exception)
        assert results[2] == "a"

    @pytest.mark.asyncio
    async def test_tables_do_not_wait_on_each_other(self, storage):
        release = asyncio.Event()
        holding = asyncio.Event()

        async def hold_slot():
            async with storage._queue.slot("busy", write=True):
                holding.set()
                await release.wait()

        holder = asyncio.create_task(hold_slot())
        await holding.wait()

        assert await asyncio.wait_for(storage.set("idle", "k", "v"), timeout=5) is True

        release.set()
        await holder


class TestShutdown:
    """close() waits for issued writes"""

    @pytest.mark.asyncio
    async def test_close_drains_pending_writes(self, storage):
        tasks = [
            asyncio.create_task(storage.set("test", f"key{i}", i)) for i in range(10)
        ]
        await asyncio.sleep(0)

        await storage.close()

        assert all(task.done() for task in tasks)
        assert [task.result() for task in tasks] == [True] * 10
        assert storage._queue.pending_writes == 0

        # Reopens lazily with everything persisted
        assert await storage.get("test", "key9") == 9

    @pytest.mark.asyncio
    async def test_drain_with_nothing_pending(self):
        queue = TableQueue()
        await asyncio.wait_for(queue.drain(), timeout=1)
        assert queue.pending_writes == 0

    @pytest.mark.asyncio
    async def test_pending_writes_counted_while_waiting(self):
        queue = TableQueue()
        entered = asyncio.Event()
        release = asyncio.Event()

        async def write():
            async with queue.slot("t", write=True):
                entered.set()
                await release.wait()

        first = asyncio.create_task(write())
        second = asyncio.create_task(write())
        await entered.wait()

        assert queue.pending_writes == 2

        drained = asyncio.create_task(queue.drain())
        await asyncio.sleep(0)
        assert not drained.done()

        release.set()
        await asyncio.gather(first, second)
        await asyncio.wait_for(drained, timeout=1)
        assert queue.pending_writes == 0

    @pytest.mark.asyncio
    async def test_idle_table_locks_are_dropped(self, storage):
        await asyncio.gather(*(storage.set(f"table{i}", "k", i) for i in range(10)))
        await storage.get("table0", "k")

        assert storage._queue._locks == {}

    @pytest.mark.asyncio
    async def test_lock_kept_while_waiters_remain(self):
        queue = TableQueue()
        releases = {"first": asyncio.Event(), "second": asyncio.Event()}
        order = []

        async def op(name):
            async with queue.slot("t"):
                order.append(name)
                await releases[name].wait()

        first = asyncio.create_task(op("first"))
        second = asyncio.create_task(op("second"))
        await asyncio.sleep(0)

        lock = queue._locks["t"]
        releases["first"].set()
        await first
        assert queue._locks.get("t") is lock

        releases["second"].set()
        await second
        assert order == ["first", "second"]
        assert "t" not in queue._locks

    @pytest.mark.asyncio
    async def test_reads_not_counted_as_writes(self):
        queue = TableQueue()
        async with queue.slot("t"):
            assert queue.pending_writes == 0
