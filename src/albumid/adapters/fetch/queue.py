"""Bounded-concurrency FIFO admission for higher-throughput services."""

from __future__ import annotations

import asyncio
from collections import deque
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from .clock import is_cancelled

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from .clock import CancellationToken


class BoundedRequestQueue:
    """Allow ``max_concurrent`` requests in flight; the rest wait in FIFO order.

    Each completion hands its slot directly to the oldest waiter, one for one.
    """

    def __init__(self, max_concurrent: int) -> None:
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._max_concurrent = max_concurrent
        self._in_flight = 0
        self._waiters: deque[asyncio.Future[None]] = deque()
        self.admitted = 0

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.done())

    async def acquire(self, token: CancellationToken | None = None) -> bool:
        if is_cancelled(token):
            return False
        if self._in_flight < self._max_concurrent and not self.waiting:
            self._in_flight += 1
            self.admitted += 1
            return True

        waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            await waiter
        except asyncio.CancelledError:
            if waiter.done() and not waiter.cancelled():
                self.release()
            raise

        if is_cancelled(token):
            self.release()
            return False
        self.admitted += 1
        return True

    def release(self) -> None:
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                waiter.set_result(None)
                return
        self._in_flight -= 1

    @asynccontextmanager
    async def slot(self, token: CancellationToken | None = None) -> AsyncIterator[bool]:
        admitted = await self.acquire(token)
        try:
            yield admitted
        finally:
            if admitted:
                self.release()
