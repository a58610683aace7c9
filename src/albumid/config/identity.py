"""Tuning values for duplicate detection and the fetch gateway."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import optional_float_env
from .errors import ConfigurationError

DEFAULT_DUPLICATE_THRESHOLD = 0.15
DEFAULT_MIN_REQUEST_INTERVAL = 1.1


@dataclass(frozen=True, slots=True)
class DuplicateScanConfig:
    default_threshold: float = DEFAULT_DUPLICATE_THRESHOLD
    max_pairs: int | None = 100
    manual_max_matches: int = 5
    similar_limit: int = 3


@dataclass(frozen=True, slots=True)
class FetchGatewayConfig:
    min_interval_seconds: float = DEFAULT_MIN_REQUEST_INTERVAL
    request_timeout_seconds: float = 30.0
    artwork_max_concurrent: int = 15


@dataclass(frozen=True, slots=True)
class IdentityConfig:
    scan: DuplicateScanConfig = field(default_factory=DuplicateScanConfig)
    gateway: FetchGatewayConfig = field(default_factory=FetchGatewayConfig)


def get_identity_config() -> IdentityConfig:
    threshold = optional_float_env("ALBUMID_DUPLICATE_THRESHOLD", DEFAULT_DUPLICATE_THRESHOLD)
    if not 0.0 <= threshold <= 1.0:
        raise ConfigurationError("ALBUMID_DUPLICATE_THRESHOLD must be within [0, 1]")

    interval = optional_float_env("ALBUMID_MIN_REQUEST_INTERVAL", DEFAULT_MIN_REQUEST_INTERVAL)
    if interval < 0:
        raise ConfigurationError("ALBUMID_MIN_REQUEST_INTERVAL must be non-negative")

    return IdentityConfig(
        scan=DuplicateScanConfig(default_threshold=threshold),
        gateway=FetchGatewayConfig(min_interval_seconds=interval),
    )
