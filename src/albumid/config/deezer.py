"""Deezer artwork service configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_int_env
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_DEEZER_BASE_URL = "https://api.deezer.com"
DEFAULT_DEEZER_MAX_CONCURRENT = 15


@dataclass(frozen=True, slots=True)
class DeezerConfig:
    resilience: ResilienceConfig
    max_concurrent: int = DEFAULT_DEEZER_MAX_CONCURRENT
    search_limit: int = 5


def get_deezer_config() -> DeezerConfig:
    max_concurrent = optional_int_env("DEEZER_MAX_CONCURRENT", DEFAULT_DEEZER_MAX_CONCURRENT)
    if max_concurrent < 1:
        raise ConfigurationError("DEEZER_MAX_CONCURRENT must be at least 1")

    resilience = ResilienceConfig(
        name="deezer",
        base_url=DEFAULT_DEEZER_BASE_URL,
        timeout_seconds=10.0,
        ratelimit=RateLimit(max_calls=50, per_seconds=5.0),
        retry=RetryPolicy(total=1, status_forcelist=frozenset({429, 500, 502, 503, 504})),
        default_headers={"Accept": "application/json"},
    )
    return DeezerConfig(resilience=resilience, max_concurrent=max_concurrent)
