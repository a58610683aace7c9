"""Process-wide minimum spacing between requests, ordered by priority."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from enum import IntEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .clock import AsyncioClock, is_cancelled

if TYPE_CHECKING:
    from albumid.domain.ports.fetching import Clock

    from .clock import CancellationToken

log = getLogger(__name__)


class Priority(IntEnum):
    LOW = 1
    NORMAL = 2
    HIGH = 3


@dataclass(order=True, slots=True)
class _Waiter:
    rank: int
    sequence: int
    future: asyncio.Future[bool] = field(compare=False)
    token: CancellationToken | None = field(compare=False, default=None)


class PriorityRateLimiter:
    """Admit one caller at a time, at least ``min_interval`` seconds apart.

    Priority only reorders callers that are already waiting; it never shortens the
    interval. Equal priorities are admitted in arrival order. A waiter whose token is
    cancelled, or whose task is cancelled, is dropped without using a slot.
    """

    def __init__(self, min_interval: float, *, clock: Clock | None = None) -> None:
        if min_interval < 0:
            raise ValueError("min_interval must be non-negative")
        self._min_interval = min_interval
        self._clock: Clock = clock or AsyncioClock()
        self._waiters: list[_Waiter] = []
        self._sequence = itertools.count()
        self._last_dispatch: float | None = None
        self._pump: asyncio.Task[None] | None = None
        self.dispatched = 0
        self.dropped = 0

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def waiting(self) -> int:
        return sum(1 for waiter in self._waiters if not waiter.future.done())

    async def acquire(
        self,
        priority: Priority = Priority.NORMAL,
        token: CancellationToken | None = None,
    ) -> bool:
        """Wait for a dispatch slot; returns ``False`` if cancelled before admission."""

        if is_cancelled(token):
            return False
        loop = asyncio.get_running_loop()
        waiter = _Waiter(
            rank=-int(priority),
            sequence=next(self._sequence),
            future=loop.create_future(),
            token=token,
        )
        heapq.heappush(self._waiters, waiter)
        if self._pump is None:
            self._pump = loop.create_task(self._dispatch())
        return await waiter.future

    async def _dispatch(self) -> None:
        try:
            while self._waiters:
                waiter = heapq.heappop(self._waiters)
                if waiter.future.done():
                    self.dropped += 1
                    continue
                if is_cancelled(waiter.token):
                    self.dropped += 1
                    waiter.future.set_result(False)
                    continue
                delay = self._delay()
                if delay > 0:
                    # requeued: arrivals during the wait may outrank it
                    heapq.heappush(self._waiters, waiter)
                    await self._clock.sleep(delay)
                    continue
                self._last_dispatch = self._clock.monotonic()
                self.dispatched += 1
                waiter.future.set_result(True)
                # admitted caller runs before the next slot is considered
                await asyncio.sleep(0)
        finally:
            self._pump = None

    def _delay(self) -> float:
        if self._last_dispatch is None:
            return 0.0
        return self._last_dispatch + self._min_interval - self._clock.monotonic()
