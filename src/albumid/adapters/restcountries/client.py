"""REST Countries client and the country lookup service built on it."""

from __future__ import annotations

from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.adapters.fetch import Priority
from albumid.adapters.http_resilience import ResilientClient
from albumid.domain.country import CountryResolver, resolve_country_code

from .schema import RestCountry

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.adapters.fetch import CancellationToken, FetchGateway
    from albumid.config.http_resilience import ResilienceConfig
    from albumid.config.restcountries import RestCountriesConfig
    from albumid.domain.country import CountryRecord

log = getLogger(__name__)

COUNTRY_NAMESPACE = "restcountries:alpha"


class RestCountriesAPIError(RuntimeError):
    """Raised when REST Countries returns an unexpected response."""


class RestCountriesClient:
    def __init__(
        self,
        *,
        config: RestCountriesConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    async def fetch_country_async(self, code: str) -> CountryRecord | None:
        normalized = code.strip().upper()
        if not normalized:
            return None

        async with self._client_factory(self._resilience) as client:
            response = await client.get(f"alpha/{normalized}")

        if response.status_code == HTTPStatus.NOT_FOUND:
            log.debug("REST Countries: no country for code %s", normalized)
            return None
        response.raise_for_status()

        payload = response.json()
        # /alpha answers with a one-element list in v3.1
        if isinstance(payload, list):
            payload = payload[0] if payload else None
        if payload is None:
            return None
        if not isinstance(payload, dict):
            raise RestCountriesAPIError("Unexpected REST Countries response payload")
        return RestCountry.model_validate(payload).to_record()


class CountryLookupService:
    """Resolve country codes, asking REST Countries only when the static table misses."""

    def __init__(
        self,
        *,
        client: RestCountriesClient,
        gateway: FetchGateway,
        resolver: CountryResolver | None = None,
    ) -> None:
        self._client = client
        self._gateway = gateway
        self._resolver = resolver or CountryResolver()

    async def resolve(
        self,
        code: str | None,
        *,
        token: CancellationToken | None = None,
    ) -> str:
        normalized = (code or "").strip().upper()
        if not normalized:
            return ""
        local = self._resolver.resolve(normalized)
        if local and resolve_country_code(normalized):
            return local

        async def call() -> CountryRecord | None:
            return await self._client.fetch_country_async(normalized)

        result = await self._gateway.fetch(
            COUNTRY_NAMESPACE, (normalized,), call, priority=Priority.LOW, token=token
        )
        if not result.found:
            return local
        return self._resolver.resolve(normalized, result.value)
