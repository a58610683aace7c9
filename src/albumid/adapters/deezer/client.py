"""Deezer public API client (album search only, no authentication)."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.adapters.http_resilience import ResilientClient
from albumid.domain.identity.normalize import normalize_for_external_api

from .schema import DeezerAlbumSearch

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.config.deezer import DeezerConfig
    from albumid.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

SEARCH_ALBUM_PATH = "search/album"


class DeezerAPIError(RuntimeError):
    """Raised when the Deezer API returns an error payload or unexpected data."""


def build_album_query(artist: str | None, album: str | None) -> str:
    parts = (normalize_for_external_api(artist), normalize_for_external_api(album))
    return " ".join(part for part in parts if part)


class DeezerClient:
    def __init__(
        self,
        *,
        config: DeezerConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def search_albums(self, artist: str, album: str) -> DeezerAlbumSearch:
        return asyncio.run(self.search_albums_async(artist, album))

    async def search_albums_async(
        self,
        artist: str | None,
        album: str | None,
        *,
        limit: int | None = None,
    ) -> DeezerAlbumSearch:
        query = build_album_query(artist, album)
        if not query:
            return DeezerAlbumSearch()

        params = {"q": query, "limit": str(limit or self._config.search_limit)}
        async with self._client_factory(self._resilience) as client:
            response = await client.get(SEARCH_ALBUM_PATH, params=params)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise DeezerAPIError("Unexpected Deezer response payload")
        search = DeezerAlbumSearch.model_validate(payload)
        if search.error is not None:
            # Deezer reports quota and parameter errors with HTTP 200
            raise DeezerAPIError(
                f"Deezer error {search.error.code}: {search.error.message or search.error.type}"
            )
        log.debug("Deezer search %r returned %s albums", query, len(search.data))
        return search
