"""MusicBrainz configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_MUSICBRAINZ_BASE_URL = "https://musicbrainz.org/ws/2"


@dataclass(frozen=True, slots=True)
class MusicBrainzConfig:
    resilience: ResilienceConfig
    search_limit: int = 10


def get_musicbrainz_config() -> MusicBrainzConfig:
    values = require_env_vars(("MUSICBRAINZ_APP_NAME", "MUSICBRAINZ_CONTACT"))
    app_name = values["MUSICBRAINZ_APP_NAME"]
    contact = values["MUSICBRAINZ_CONTACT"]
    user_agent = f"{app_name} ({contact})"

    # pacing is owned by the fetch gateway's global limiter, not by the client
    resilience = ResilienceConfig(
        name="musicbrainz",
        base_url=DEFAULT_MUSICBRAINZ_BASE_URL,
        ratelimit=None,
        retry=RetryPolicy(total=2, backoff_factor=1.0),
        default_headers={"User-Agent": user_agent, "Accept": "application/json"},
    )

    return MusicBrainzConfig(resilience=resilience)
