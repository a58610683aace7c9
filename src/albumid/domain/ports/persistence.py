"""Persistence ports used by the identity subsystem."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from albumid.domain.identity.exclusions import ExclusionPair
    from albumid.domain.model import CanonicalRecord, ListEntry, ListUsage, MusicList


@runtime_checkable
class CatalogLookup(Protocol):
    """Bulk read access to canonical records.

    Implementations raise ``CatalogLookupError`` when the underlying store fails.
    """

    def bulk_fetch_by_id(self, ids: Sequence[str]) -> list[CanonicalRecord]: ...


@runtime_checkable
class CatalogRepository(CatalogLookup, Protocol):
    def get(self, album_id: str) -> CanonicalRecord | None: ...

    def exists(self, album_id: str) -> bool: ...

    def list_all(self) -> list[CanonicalRecord]: ...

    def add(self, record: CanonicalRecord) -> None: ...

    def update(self, record: CanonicalRecord) -> None: ...

    def delete(self, album_id: str) -> int: ...


@runtime_checkable
class ListRepository(Protocol):
    def add(self, music_list: MusicList) -> None: ...

    def get(self, list_id: str) -> MusicList | None: ...

    def delete(self, list_id: str) -> int: ...


@runtime_checkable
class ListEntryRepository(Protocol):
    def add(self, entry: ListEntry) -> int: ...

    def for_list(self, list_id: str) -> list[ListEntry]: ...

    def reassign(self, from_album_id: str, to_album_id: str) -> int: ...

    def count_references(self, album_id: str) -> int: ...

    def delete_for_album(self, album_id: str) -> int: ...

    def usages(self, album_ids: Iterable[str]) -> dict[str, list[ListUsage]]: ...

    def orphaned_album_ids(self) -> dict[str, int]: ...

    def dangling_list_ids(self) -> dict[str, int]: ...


@runtime_checkable
class ExclusionRepository(Protocol):
    """Order-independent store of operator-confirmed distinct pairs."""

    def insert(self, pair: ExclusionPair) -> bool: ...

    def delete(self, pair: ExclusionPair) -> bool: ...

    def contains(self, pair: ExclusionPair) -> bool: ...

    def list_all(self) -> list[ExclusionPair]: ...

    def delete_involving(self, album_id: str) -> int: ...
