"""Unit tests for the pywsclient.queue module."""

import asyncio

import pytest

from pywsclient import AsyncQueue


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(delay=0)


class TestAsyncQueue:

    @pytest.mark.asyncio
    async def test_buffered_items_are_returned_in_order(self) -> None:
        queue: AsyncQueue[str] = AsyncQueue()
        for item in ("a", "b", "c"):
            queue.put_nowait(item)

        assert len(queue) == 3
        assert [await queue.get(), await queue.get(), await queue.get()] == ["a", "b", "c"]
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_is_removed(self) -> None:
        queue: AsyncQueue[str] = AsyncQueue()
        task = asyncio.create_task(coro=queue.get())
        await _settle()
        assert queue.waiting == 1

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        queue.put_nowait("kept")

        assert queue.waiting == 0
        assert queue.get_nowait() == "kept"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_returns_delivered_item(self) -> None:
        queue: AsyncQueue[str] = AsyncQueue()
        task = asyncio.create_task(coro=queue.get())
        await _settle()

        queue.put_nowait("in-flight")
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert len(queue) == 1
        assert queue.get_nowait() == "in-flight"

    @pytest.mark.asyncio
    async def test_cancelled_waiter_passes_item_to_next_waiter(self) -> None:
        queue: AsyncQueue[str] = AsyncQueue()
        first = asyncio.create_task(coro=queue.get())
        await _settle()
        second = asyncio.create_task(coro=queue.get())
        await _settle()

        queue.put_nowait("item")
        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        assert await second == "item"
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_clear_drops_items_and_cancels_waiters(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()
        task = asyncio.create_task(coro=queue.get())
        await _settle()

        queue.clear()

        with pytest.raises(asyncio.CancelledError):
            await task
        queue.put_nowait(1)
        queue.clear()
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_fail_waiters(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()
        tasks = [asyncio.create_task(coro=queue.get()) for _ in range(3)]
        await _settle()

        failed = queue.fail_waiters(RuntimeError("closed"))

        assert failed == 3
        results = await asyncio.gather(*tasks, return_exceptions=True)
        assert all(isinstance(r, RuntimeError) for r in results)
        assert queue.waiting == 0

    def test_fail_waiters_with_no_waiters(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()

        assert queue.fail_waiters(RuntimeError("closed")) == 0

    def test_get_nowait_empty(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()

        with pytest.raises(asyncio.QueueEmpty):
            queue.get_nowait()

    @pytest.mark.asyncio
    async def test_items_and_waiters_never_coexist(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()
        tasks = [asyncio.create_task(coro=queue.get()) for _ in range(2)]
        await _settle()

        for i in range(4):
            queue.put_nowait(i)
            assert not (len(queue) > 0 and queue.waiting > 0)

        assert await asyncio.gather(*tasks) == [0, 1]
        assert len(queue) == 2
        assert queue.waiting == 0

    def test_repr(self) -> None:
        queue: AsyncQueue[int] = AsyncQueue()
        queue.put_nowait(1)

        assert repr(queue) == "<AsyncQueue items=1 waiting=0>"

    @pytest.mark.asyncio
    async def test_waiters_are_served_in_registration_order(self) -> None:
        queue: AsyncQueue[str] = AsyncQueue()
        tasks = []
        for _ in range(3):
            tasks.append(asyncio.create_task(coro=queue.get()))
            await _settle()

        for item in ("x", "y", "z"):
            queue.put_nowait(item)

        assert await asyncio.gather(*tasks) == ["x", "y", "z"]
        assert len(queue) == 0
