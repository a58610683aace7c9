"""Batch-scoped cache of canonical records with negative caching."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from albumid.domain.model import CanonicalRecord
    from albumid.domain.ports.persistence import CatalogLookup

log = getLogger(__name__)


class CatalogLookupCache:
    """Cache canonical records by id for the lifetime of one batch.

    Misses are cached as ``None`` so a batch never asks the store twice for the same
    id. Nothing expires on its own; call :meth:`clear` between unrelated batches.
    Lookup failures propagate as ``CatalogLookupError`` and are not cached.
    """

    def __init__(self, lookup: CatalogLookup) -> None:
        self._lookup = lookup
        self._entries: dict[str, CanonicalRecord | None] = {}
        self.bulk_lookups = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, album_id: object) -> bool:
        return album_id in self._entries

    def get(self, album_id: str | None) -> CanonicalRecord | None:
        if not album_id:
            return None
        if album_id not in self._entries:
            self.prefetch((album_id,))
        return self._entries.get(album_id)

    def prefetch(self, album_ids: Iterable[str | None]) -> int:
        """Load every uncached id with a single bulk lookup.

        Returns the number of ids sent to the store; ``0`` means no lookup was issued.
        """

        pending = [
            album_id
            for album_id in dict.fromkeys(album_ids)
            if album_id and album_id not in self._entries
        ]
        if not pending:
            return 0

        records = self._lookup.bulk_fetch_by_id(pending)
        self.bulk_lookups += 1
        found = {record.id: record for record in records}
        for album_id in pending:
            self._entries[album_id] = found.get(album_id)
        log.debug("Prefetched %s catalog ids (%s found)", len(pending), len(found))
        return len(pending)

    def clear(self) -> None:
        self._entries.clear()
