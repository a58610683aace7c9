"""Application configuration helpers."""

from __future__ import annotations

from .deezer import DeezerConfig, get_deezer_config
from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .identity import (
    DuplicateScanConfig,
    FetchGatewayConfig,
    IdentityConfig,
    get_identity_config,
)
from .musicbrainz import MusicBrainzConfig, get_musicbrainz_config
from .restcountries import RestCountriesConfig, get_restcountries_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "DeezerConfig",
    "DuplicateScanConfig",
    "FetchGatewayConfig",
    "IdentityConfig",
    "MissingConfigurationError",
    "MusicBrainzConfig",
    "RateLimit",
    "ResilienceConfig",
    "RestCountriesConfig",
    "RetryPolicy",
    "StorageConfig",
    "get_database_config",
    "get_deezer_config",
    "get_identity_config",
    "get_musicbrainz_config",
    "get_restcountries_config",
    "get_storage_config",
    "require_env_vars",
]
