"""Cover artwork lookups through the bounded Deezer queue."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from albumid.adapters.fetch import CancellationToken, FetchGateway, FetchResult
    from albumid.adapters.fetch.gateway import ResultCallback

    from .client import DeezerClient
    from .schema import DeezerAlbum

log = getLogger(__name__)

ARTWORK_NAMESPACE = "deezer:artwork"

_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(slots=True, frozen=True)
class ArtworkMatch:
    deezer_id: int
    title: str
    artist: str
    cover_url: str


def _match_key(value: str) -> str:
    return _NON_WORD.sub("", value.lower())


def pick_best_match(albums: Sequence[DeezerAlbum], artist: str, album: str) -> DeezerAlbum | None:
    """Choose the search hit that most plausibly is ``album`` by ``artist``.

    Exact title and artist match first, then a title containing or contained in the
    wanted title, then the first hit.
    """

    if not albums:
        return None
    wanted_title = _match_key(album)
    wanted_artist = _match_key(artist)

    for candidate in albums:
        if (
            _match_key(candidate.title) == wanted_title
            and _match_key(candidate.artist.name) == wanted_artist
        ):
            return candidate

    if wanted_title:
        for candidate in albums:
            title = _match_key(candidate.title)
            if title and (wanted_title in title or title in wanted_title):
                return candidate

    return albums[0]


class ArtworkService:
    """Deezer cover lookups admitted through the gateway's bounded queue."""

    def __init__(self, *, client: DeezerClient, gateway: FetchGateway) -> None:
        self._client = client
        self._gateway = gateway

    async def fetch_artwork(
        self,
        artist: str,
        album: str,
        *,
        token: CancellationToken | None = None,
        on_result: ResultCallback[ArtworkMatch] | None = None,
    ) -> FetchResult[ArtworkMatch]:
        async def call() -> ArtworkMatch | None:
            search = await self._client.search_albums_async(artist, album)
            best = pick_best_match(search.data, artist, album)
            if best is None or best.best_cover_url is None:
                return None
            return ArtworkMatch(
                deezer_id=best.id,
                title=best.title,
                artist=best.artist.name,
                cover_url=best.best_cover_url,
            )

        return await self._gateway.fetch_bounded(
            ARTWORK_NAMESPACE, (artist, album), call, token=token, on_result=on_result
        )

    async def fetch_artwork_batch(
        self,
        requests: Sequence[tuple[str, str]],
        *,
        token: CancellationToken | None = None,
        on_result: ResultCallback[ArtworkMatch] | None = None,
    ) -> list[FetchResult[ArtworkMatch]]:
        """Look up many covers concurrently; results keep the order of ``requests``."""

        results = await asyncio.gather(
            *(
                self.fetch_artwork(artist, album, token=token, on_result=on_result)
                for artist, album in requests
            )
        )
        found = sum(1 for result in results if result.found)
        log.info("Artwork batch: %s/%s covers found", found, len(results))
        return list(results)
