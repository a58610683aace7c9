from __future__ import annotations

import asyncio

from albumid.adapters.fetch import BoundedRequestQueue, FetchGateway, PriorityRateLimiter
from albumid.adapters.musicbrainz import (
    MusicBrainzArtistSearch,
    MusicBrainzMetadataService,
    MusicBrainzReleaseGroup,
    MusicBrainzReleaseGroupSearch,
)
from albumid.adapters.musicbrainz.schema import MusicBrainzArtist
from albumid.domain.country import CountryResolver
from tests.helpers.fetching import FakeClock


class FakeMusicBrainzClient:
    def __init__(
        self,
        *,
        release_groups: list[MusicBrainzReleaseGroup] | None = None,
        artists: list[MusicBrainzArtist] | None = None,
    ) -> None:
        self._release_groups = release_groups or []
        self._artists = artists or []
        self.queries: list[str] = []
        self.artist_names: list[str] = []

    async def search_release_groups_async(
        self, *, query: str, limit: int | None = None, offset: int = 0
    ) -> MusicBrainzReleaseGroupSearch:
        del limit, offset
        self.queries.append(query)
        return MusicBrainzReleaseGroupSearch(release_groups=self._release_groups)

    async def search_artists_async(self, *, name: str, limit: int = 1) -> MusicBrainzArtistSearch:
        del limit
        self.artist_names.append(name)
        return MusicBrainzArtistSearch(artists=self._artists)

    async def fetch_release_group_async(
        self, *, mbid: str, inc: tuple[str, ...] | None = None
    ) -> MusicBrainzReleaseGroup | None:
        del inc
        return next((group for group in self._release_groups if group.id == mbid), None)


def _gateway() -> FetchGateway:
    return FetchGateway(
        limiter=PriorityRateLimiter(1.1, clock=FakeClock()),
        queue=BoundedRequestQueue(1),
    )


def _service(
    client: FakeMusicBrainzClient, resolver: CountryResolver | None = None
) -> MusicBrainzMetadataService:
    return MusicBrainzMetadataService(
        client=client,  # type: ignore[arg-type]
        gateway=_gateway(),
        country_resolver=resolver,
    )


def _release_group(mbid: str, title: str, artist: str) -> MusicBrainzReleaseGroup:
    return MusicBrainzReleaseGroup.model_validate(
        {
            "id": mbid,
            "title": title,
            "first-release-date": "1997",
            "artist-credit": [{"name": artist, "artist": {"id": "x", "name": artist}}],
        }
    )


def test_search_summarises_and_caches() -> None:
    client = FakeMusicBrainzClient(
        release_groups=[_release_group("rg-1", "OK Computer", "Radiohead")],
    )
    service = _service(client)

    async def scenario() -> None:
        first = await service.search_release_groups("Radiohead", "OK Computer")
        second = await service.search_release_groups("radiohead", "ok computer")
        assert first.value is not None
        assert first.value[0].artist == "Radiohead"
        assert first.value[0].first_release_date == "1997"
        assert second.cached

    asyncio.run(scenario())

    assert client.queries == ['releasegroup:"OK Computer" AND artist:"Radiohead"']


def test_empty_search_is_not_found() -> None:
    service = _service(FakeMusicBrainzClient())

    result = asyncio.run(service.search_release_groups("Nobody", "Nothing"))

    assert not result.found


def test_release_group_lookup() -> None:
    client = FakeMusicBrainzClient(release_groups=[_release_group("rg-1", "Kid A", "Radiohead")])
    service = _service(client)

    result = asyncio.run(service.release_group("rg-1"))

    assert result.value is not None
    assert result.value.title == "Kid A"


def test_artist_country_resolves_code_to_name() -> None:
    client = FakeMusicBrainzClient(
        artists=[MusicBrainzArtist(id="a", name="Björk", country="IS")],
    )
    service = _service(client)

    assert asyncio.run(service.artist_country("Björk")) == "Iceland"


def test_artist_country_uses_allowed_names() -> None:
    client = FakeMusicBrainzClient(
        artists=[MusicBrainzArtist(id="a", name="Pavement", country="US")],
    )
    service = _service(client, CountryResolver(["United States"]))

    assert asyncio.run(service.artist_country("Pavement")) == "United States"


def test_unknown_artist_has_empty_country() -> None:
    service = _service(FakeMusicBrainzClient())

    assert asyncio.run(service.artist_country("Nobody")) == ""
