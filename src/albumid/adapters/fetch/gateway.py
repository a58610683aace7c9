"""Single access path to rate-limited third-party services."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .cache import CacheEntry, ResponseCache
from .clock import is_cancelled
from .limiter import Priority, PriorityRateLimiter
from .queue import BoundedRequestQueue

if TYPE_CHECKING:
    from collections.abc import Sequence

    from albumid.config.identity import FetchGatewayConfig
    from albumid.domain.ports.fetching import Clock

    from .clock import CancellationToken

log = getLogger(__name__)


class FetchStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass(slots=True, frozen=True)
class FetchResult[T]:
    status: FetchStatus
    value: T | None = None
    cached: bool = False
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status is FetchStatus.FOUND


type RemoteCall[T] = Callable[[], Awaitable[T | None]]
type ResultCallback[T] = Callable[[FetchResult[T]], None]


@dataclass(slots=True, frozen=True)
class GatewayStats:
    dispatched: int
    dropped: int
    rate_limited_waiting: int
    in_flight: int
    queued: int
    cache_entries: int
    cache_hits: int
    cache_misses: int


class FetchGateway:
    """Route remote lookups through one rate limiter, one bounded queue and one cache.

    :meth:`fetch` goes through the global priority rate limiter (primary metadata
    service). :meth:`fetch_bounded` goes through the bounded-concurrency queue
    (secondary artwork service). Both return a :class:`FetchResult` and never raise
    for remote failures: errors are logged and reported as ``ERROR``. Only
    definitive answers, found or not found, are cached.
    """

    def __init__(
        self,
        *,
        limiter: PriorityRateLimiter,
        queue: BoundedRequestQueue,
        cache: ResponseCache | None = None,
        timeout_seconds: float = 30.0,
    ) -> None:
        self._limiter = limiter
        self._queue = queue
        self._cache = cache or ResponseCache()
        self._timeout = timeout_seconds

    @classmethod
    def from_config(
        cls,
        config: FetchGatewayConfig,
        *,
        clock: Clock | None = None,
    ) -> FetchGateway:
        return cls(
            limiter=PriorityRateLimiter(config.min_interval_seconds, clock=clock),
            queue=BoundedRequestQueue(config.artwork_max_concurrent),
            timeout_seconds=config.request_timeout_seconds,
        )

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    async def fetch[T](
        self,
        namespace: str,
        key_parts: Sequence[str | None],
        call: RemoteCall[T],
        *,
        priority: Priority = Priority.NORMAL,
        token: CancellationToken | None = None,
        on_result: ResultCallback[T] | None = None,
    ) -> FetchResult[T]:
        key = ResponseCache.key(*key_parts)
        cached = self._cache.get(namespace, key)
        if cached is not None:
            return self._deliver(_from_cache(cached), token, on_result)

        if not await self._limiter.acquire(priority, token):
            log.debug("%s lookup %r cancelled before dispatch", namespace, key)
            return FetchResult(FetchStatus.CANCELLED)

        result: FetchResult[T] = await self._execute(namespace, key, call)
        return self._deliver(result, token, on_result)

    async def fetch_bounded[T](
        self,
        namespace: str,
        key_parts: Sequence[str | None],
        call: RemoteCall[T],
        *,
        token: CancellationToken | None = None,
        on_result: ResultCallback[T] | None = None,
    ) -> FetchResult[T]:
        key = ResponseCache.key(*key_parts)
        cached = self._cache.get(namespace, key)
        if cached is not None:
            return self._deliver(_from_cache(cached), token, on_result)

        async with self._queue.slot(token) as admitted:
            if not admitted:
                log.debug("%s lookup %r cancelled before admission", namespace, key)
                return FetchResult(FetchStatus.CANCELLED)
            result: FetchResult[T] = await self._execute(namespace, key, call)
        return self._deliver(result, token, on_result)

    def stats(self) -> GatewayStats:
        return GatewayStats(
            dispatched=self._limiter.dispatched,
            dropped=self._limiter.dropped,
            rate_limited_waiting=self._limiter.waiting,
            in_flight=self._queue.in_flight,
            queued=self._queue.waiting,
            cache_entries=len(self._cache),
            cache_hits=self._cache.hits,
            cache_misses=self._cache.misses,
        )

    async def _execute[T](self, namespace: str, key: str, call: RemoteCall[T]) -> FetchResult[T]:
        try:
            value = await asyncio.wait_for(call(), timeout=self._timeout)
        except TimeoutError:
            log.warning("%s lookup %r timed out after %.1fs", namespace, key, self._timeout)
            return FetchResult(FetchStatus.ERROR, error="timeout")
        except Exception as exc:  # noqa: BLE001
            log.warning("%s lookup %r failed: %s", namespace, key, exc)
            return FetchResult(FetchStatus.ERROR, error=str(exc) or type(exc).__name__)

        self._cache.store(namespace, key, value)
        if value is None:
            return FetchResult(FetchStatus.NOT_FOUND)
        return FetchResult(FetchStatus.FOUND, value=value)

    @staticmethod
    def _deliver[T](
        result: FetchResult[T],
        token: CancellationToken | None,
        on_result: ResultCallback[T] | None,
    ) -> FetchResult[T]:
        if is_cancelled(token):
            return FetchResult(FetchStatus.CANCELLED)
        if on_result is not None:
            on_result(result)
        return result


def _from_cache[T](entry: CacheEntry) -> FetchResult[T]:
    if entry.negative:
        return FetchResult(FetchStatus.NOT_FOUND, cached=True)
    return FetchResult(FetchStatus.FOUND, value=entry.value, cached=True)  # type: ignore[arg-type]
