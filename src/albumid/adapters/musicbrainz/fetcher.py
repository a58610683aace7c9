"""Gateway-backed MusicBrainz lookups for search and enrichment."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.adapters.fetch import Priority
from albumid.domain.country import CountryResolver

from .client import build_release_group_query

if TYPE_CHECKING:
    from albumid.adapters.fetch import CancellationToken, FetchGateway, FetchResult

    from .client import MusicBrainzClient
    from .schema import MusicBrainzReleaseGroup

log = getLogger(__name__)

RELEASE_GROUP_NAMESPACE = "musicbrainz:release-group"
SEARCH_NAMESPACE = "musicbrainz:search"
ARTIST_COUNTRY_NAMESPACE = "musicbrainz:artist-country"


@dataclass(slots=True, frozen=True)
class ReleaseGroupSummary:
    mbid: str
    title: str
    artist: str
    first_release_date: str | None = None
    primary_type: str | None = None
    score: int | None = None


def summarize_release_group(release_group: MusicBrainzReleaseGroup) -> ReleaseGroupSummary:
    return ReleaseGroupSummary(
        mbid=release_group.id,
        title=release_group.title,
        artist=release_group.artist_name,
        first_release_date=release_group.first_release_date or None,
        primary_type=release_group.primary_type,
        score=release_group.score,
    )


class MusicBrainzMetadataService:
    """MusicBrainz lookups routed through the global rate limiter."""

    def __init__(
        self,
        *,
        client: MusicBrainzClient,
        gateway: FetchGateway,
        country_resolver: CountryResolver | None = None,
    ) -> None:
        self._client = client
        self._gateway = gateway
        self._countries = country_resolver or CountryResolver()

    async def search_release_groups(
        self,
        artist: str | None,
        title: str | None,
        *,
        priority: Priority = Priority.NORMAL,
        token: CancellationToken | None = None,
    ) -> FetchResult[list[ReleaseGroupSummary]]:
        query = build_release_group_query(artist, title)

        async def call() -> list[ReleaseGroupSummary] | None:
            search = await self._client.search_release_groups_async(query=query)
            summaries = [summarize_release_group(group) for group in search.release_groups]
            return summaries or None

        return await self._gateway.fetch(
            SEARCH_NAMESPACE, (artist, title), call, priority=priority, token=token
        )

    async def release_group(
        self,
        mbid: str,
        *,
        priority: Priority = Priority.HIGH,
        token: CancellationToken | None = None,
    ) -> FetchResult[ReleaseGroupSummary]:
        async def call() -> ReleaseGroupSummary | None:
            group = await self._client.fetch_release_group_async(mbid=mbid)
            return summarize_release_group(group) if group is not None else None

        return await self._gateway.fetch(
            RELEASE_GROUP_NAMESPACE, (mbid,), call, priority=priority, token=token
        )

    async def artist_country(
        self,
        artist: str,
        *,
        priority: Priority = Priority.LOW,
        token: CancellationToken | None = None,
    ) -> str:
        """Return the artist's country name, or ``""`` when it cannot be determined."""

        async def call() -> str | None:
            search = await self._client.search_artists_async(name=artist)
            if not search.artists:
                return None
            return search.artists[0].country_code

        result = await self._gateway.fetch(
            ARTIST_COUNTRY_NAMESPACE, (artist,), call, priority=priority, token=token
        )
        if not result.found or result.value is None:
            return ""
        return self._countries.resolve(result.value)
