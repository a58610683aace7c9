"""MusicBrainz API client."""

from __future__ import annotations

import asyncio
from enum import StrEnum
from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.adapters.http_resilience import ResilientClient

from .schema import MusicBrainzArtistSearch, MusicBrainzReleaseGroup, MusicBrainzReleaseGroupSearch

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.config.http_resilience import ResilienceConfig
    from albumid.config.musicbrainz import MusicBrainzConfig

log = getLogger(__name__)

DEFAULT_RELEASE_GROUP_INC = ("artist-credits",)


class MBEntityType(StrEnum):
    ARTIST = "artist"
    RELEASE_GROUP = "release-group"


class MusicBrainzAPIError(RuntimeError):
    """Raised when the MusicBrainz API returns an unexpected response."""


def lucene_quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_release_group_query(artist: str | None, title: str | None) -> str:
    clauses: list[str] = []
    if title and title.strip():
        clauses.append(f"releasegroup:{lucene_quote(title.strip())}")
    if artist and artist.strip():
        clauses.append(f"artist:{lucene_quote(artist.strip())}")
    return " AND ".join(clauses)


class MusicBrainzClient:
    """Low-level HTTP client for the MusicBrainz API.

    Pacing is not done here; requests are expected to arrive through the fetch
    gateway, which enforces the service-wide interval.
    """

    def __init__(
        self,
        *,
        config: MusicBrainzConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def search_release_groups(
        self,
        *,
        query: str,
        limit: int | None = None,
    ) -> MusicBrainzReleaseGroupSearch:
        return asyncio.run(self.search_release_groups_async(query=query, limit=limit))

    async def search_release_groups_async(
        self,
        *,
        query: str,
        limit: int | None = None,
        offset: int = 0,
    ) -> MusicBrainzReleaseGroupSearch:
        params = {
            "fmt": "json",
            "query": query,
            "limit": str(limit or self._config.search_limit),
            "offset": str(offset),
        }
        payload = await self._get_json(path=f"{MBEntityType.RELEASE_GROUP}", params=params)
        if payload is None:
            return MusicBrainzReleaseGroupSearch()
        return MusicBrainzReleaseGroupSearch.model_validate(payload)

    async def search_artists_async(
        self,
        *,
        name: str,
        limit: int = 1,
    ) -> MusicBrainzArtistSearch:
        params = {
            "fmt": "json",
            "query": f"artist:{lucene_quote(name.strip())}",
            "limit": str(limit),
        }
        payload = await self._get_json(path=f"{MBEntityType.ARTIST}", params=params)
        if payload is None:
            return MusicBrainzArtistSearch()
        return MusicBrainzArtistSearch.model_validate(payload)

    async def fetch_release_group_async(
        self,
        *,
        mbid: str,
        inc: tuple[str, ...] | None = None,
    ) -> MusicBrainzReleaseGroup | None:
        inc_values = inc if inc is not None else DEFAULT_RELEASE_GROUP_INC
        params = {"fmt": "json"}
        if inc_values:
            params["inc"] = "+".join(inc_values)
        payload = await self._get_json(path=f"{MBEntityType.RELEASE_GROUP}/{mbid}", params=params)
        if payload is None:
            return None
        return MusicBrainzReleaseGroup.model_validate(payload)

    async def _get_json(self, *, path: str, params: dict[str, str]) -> dict[str, object] | None:
        if self._resilience.base_url is None:
            raise MusicBrainzAPIError("Missing MusicBrainz base_url in resilience configuration")

        async with self._client_factory(self._resilience) as client:
            response = await client.get(path, params=params)

        if response.status_code == HTTPStatus.NOT_FOUND:
            log.debug("MusicBrainz %s: not found", path)
            return None
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise MusicBrainzAPIError("Unexpected MusicBrainz response payload")
        return payload
