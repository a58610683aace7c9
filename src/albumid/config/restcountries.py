"""REST Countries configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_RESTCOUNTRIES_BASE_URL = "https://restcountries.com/v3.1"


@dataclass(frozen=True, slots=True)
class RestCountriesConfig:
    resilience: ResilienceConfig


def get_restcountries_config() -> RestCountriesConfig:
    resilience = ResilienceConfig(
        name="restcountries",
        base_url=DEFAULT_RESTCOUNTRIES_BASE_URL,
        timeout_seconds=10.0,
        retry=RetryPolicy(total=1),
    )
    return RestCountriesConfig(resilience=resilience)
