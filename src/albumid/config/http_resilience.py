"""Configuration types for resilient HTTP clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

GATEWAY_STATUS_CODES: frozenset[int] = frozenset({503, 504})


class RetryableStatusError(httpx.HTTPStatusError):
    """Raised for responses whose status code is worth another attempt."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__(
            f"Retryable status {response.status_code} from {response.request.url}",
            request=response.request,
            response=response,
        )


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Retry budget: ``total`` extra attempts, waiting ``backoff_factor * 2**(n-1)`` s."""

    total: int = 2
    backoff_factor: float = 1.0
    max_backoff_wait: float = 30.0
    status_forcelist: frozenset[int] = field(default_factory=lambda: GATEWAY_STATUS_CODES)
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
        RetryableStatusError,
    )

    def build(self, logger: logging.Logger | None = None) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.total + 1),
            wait=wait_exponential(multiplier=self.backoff_factor, max=self.max_backoff_wait),
            retry=retry_if_exception_type(self.retry_on_exceptions),
            before_sleep=before_sleep_log(logger, logging.WARNING) if logger else None,
            reraise=True,
        )


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    """Everything a :class:`ResilientClient` needs to talk to one remote service."""

    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    default_headers: Mapping[str, str] | None = None
