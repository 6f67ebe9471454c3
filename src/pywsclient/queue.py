"""An unbounded FIFO that bridges pushed items to awaiting consumers."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Generic, TypeVar

__all__: list[str] = ["AsyncQueue"]

T = TypeVar("T")


class AsyncQueue(Generic[T]):
    """A FIFO that hands items to waiting consumers before buffering them.

    Items and waiters are never held at the same time: an arriving item goes
    to the oldest waiter if there is one, and a consumer is served from the
    buffer before it is allowed to wait.
    """

    def __init__(self) -> None:
        """Initialize an empty queue."""
        self._items: deque[T] = deque()
        self._waiters: deque[asyncio.Future[T]] = deque()

    @property
    def waiting(self) -> int:
        """Get the number of consumers waiting for an item."""
        return sum(1 for waiter in self._waiters if not waiter.done())

    def clear(self) -> None:
        """Drop buffered items and cancel any remaining waiters."""
        self._items.clear()
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.cancel()

    def fail_waiters(self, exc: BaseException) -> int:
        """Fail every pending waiter in FIFO order and return how many were failed."""
        count = 0
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_exception(exc)
                count += 1
        return count

    async def get(self) -> T:
        """Remove and return the oldest item, waiting for one if the queue is empty."""
        if self._items:
            return self._items.popleft()

        waiter: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await waiter
        except asyncio.CancelledError:
            if waiter in self._waiters:
                self._waiters.remove(waiter)
            if waiter.done() and not waiter.cancelled() and waiter.exception() is None:
                self._put_front(waiter.result())
            raise

    def get_nowait(self) -> T:
        """Remove and return the oldest buffered item."""
        if not self._items:
            raise asyncio.QueueEmpty
        return self._items.popleft()

    def put_nowait(self, item: T) -> None:
        """Deliver an item to the oldest waiter, or buffer it."""
        if not self._deliver(item):
            self._items.append(item)

    def _deliver(self, item: T) -> bool:
        """Hand an item to the oldest live waiter."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(item)
                return True
        return False

    def _put_front(self, item: T) -> None:
        """Return an undelivered item ahead of everything else."""
        if not self._deliver(item):
            self._items.appendleft(item)

    def __len__(self) -> int:
        """Get the number of buffered items."""
        return len(self._items)

    def __repr__(self) -> str:
        """Provide a developer-friendly representation."""
        return f"<AsyncQueue items={len(self._items)} waiting={self.waiting}>"
