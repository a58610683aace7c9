"""Rate-limited, cached and cancellable access to external services."""

from __future__ import annotations

from .cache import CacheEntry, ResponseCache
from .clock import AsyncioClock, CancellationToken
from .gateway import FetchGateway, FetchResult, FetchStatus, GatewayStats
from .limiter import Priority, PriorityRateLimiter
from .queue import BoundedRequestQueue

__all__ = [
    "AsyncioClock",
    "BoundedRequestQueue",
    "CacheEntry",
    "CancellationToken",
    "FetchGateway",
    "FetchResult",
    "FetchStatus",
    "GatewayStats",
    "Priority",
    "PriorityRateLimiter",
    "ResponseCache",
]
