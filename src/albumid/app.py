"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.adapters.fetch import FetchGateway
from albumid.adapters.restcountries import CountryLookupService, RestCountriesClient
from albumid.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from albumid.config import get_identity_config, get_restcountries_config
from albumid.domain.country import CountryResolver
from albumid.domain.identity import (
    CanonicalValueResolver,
    CatalogCurator,
    CatalogLookupCache,
    DuplicateScanEngine,
    ScanSettings,
)
from albumid.domain.ports.unit_of_work import CatalogUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Iterable

    from albumid.config.identity import DuplicateScanConfig
    from albumid.domain.identity import (
        ListEntryDraft,
        ManualAuditReport,
        MergeResult,
        ScanReport,
    )
    from albumid.domain.model import ListEntry

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def _scan_settings(config: DuplicateScanConfig | None) -> ScanSettings:
    scan = config or get_identity_config().scan
    return ScanSettings(
        default_threshold=scan.default_threshold,
        max_pairs=scan.max_pairs,
        manual_max_matches=scan.manual_max_matches,
        similar_limit=scan.similar_limit,
    )


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork


def scan_duplicates(
    *,
    threshold: float | None = None,
    limit: int | None = None,
    unbounded: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: DuplicateScanConfig | None = None,
) -> ScanReport:
    """Scan the whole catalog for likely duplicate pairs."""

    engine = DuplicateScanEngine(
        _unit_of_work_factory(unit_of_work_factory),
        _scan_settings(config),
    )
    if unbounded:
        return engine.scan(threshold, None)
    if limit is not None:
        return engine.scan(threshold, limit)
    return engine.scan(threshold)


def merge_albums(
    survivor_id: str,
    loser_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MergeResult:
    curator = CatalogCurator(_unit_of_work_factory(unit_of_work_factory))
    return curator.merge(survivor_id, loser_id)


def mark_albums_distinct(
    album_id_a: str,
    album_id_b: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> bool:
    curator = CatalogCurator(_unit_of_work_factory(unit_of_work_factory))
    return curator.mark_distinct(album_id_a, album_id_b)


def audit_manual_albums(
    *,
    threshold: float | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    config: DuplicateScanConfig | None = None,
) -> ManualAuditReport:
    engine = DuplicateScanEngine(
        _unit_of_work_factory(unit_of_work_factory),
        _scan_settings(config),
    )
    return engine.audit_manual(threshold)


def merge_manual_album(
    manual_id: str,
    canonical_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> MergeResult:
    curator = CatalogCurator(_unit_of_work_factory(unit_of_work_factory))
    return curator.merge_manual(manual_id, canonical_id)


def resolve_list_entries(
    drafts: Iterable[ListEntryDraft],
    *,
    save: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ListEntry]:
    """Resolve submitted list entries against the catalog and optionally store them.

    All referenced albums are loaded with a single bulk lookup; the lookup cache lives
    only for this batch.
    """

    pending = list(drafts)
    factory = _unit_of_work_factory(unit_of_work_factory)
    with factory() as uow:
        cache = CatalogLookupCache(uow.repositories.albums)
        resolver = CanonicalValueResolver(cache)
        entries = resolver.resolve_entries(pending)
        if save:
            for entry in entries:
                uow.repositories.entries.add(entry)
            uow.commit()

    overrides = sum(1 for entry in entries if entry.has_overrides)
    log.info(
        f"Resolved {len(entries)} list entries: overrides={overrides}, "
        f"bulk_lookups={cache.bulk_lookups}, saved={save}"
    )
    return entries


def resolve_country(code: str, *, online: bool = True) -> str:
    """Resolve a country code to its canonical name, asking REST Countries if needed."""

    if not online:
        return CountryResolver().resolve(code)

    async def lookup() -> str:
        gateway = FetchGateway.from_config(get_identity_config().gateway)
        service = CountryLookupService(
            client=RestCountriesClient(config=get_restcountries_config()),
            gateway=gateway,
        )
        return await service.resolve(code)

    return asyncio.run(lookup())
