"""Operator decisions on duplicate candidates: merge, mark distinct, clean up."""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from albumid.domain.errors import IntegrityViolationError, InvalidInputError
from albumid.domain.model import is_manual_id

from .exclusions import ExclusionPair
from .normalize import is_blank

if TYPE_CHECKING:
    from collections.abc import Callable

    from albumid.domain.model import CanonicalRecord
    from albumid.domain.ports.unit_of_work import CatalogRepositories, CatalogUnitOfWork

log = getLogger(__name__)

_FILLABLE_TEXT_FIELDS = ("release_date", "country", "genre_1", "genre_2", "summary")


@dataclass(slots=True, frozen=True)
class MergeResult:
    survivor_id: str
    loser_id: str
    references_moved: int
    exclusions_removed: int
    filled_fields: tuple[str, ...] = ()


def fill_missing_metadata(
    survivor: CanonicalRecord,
    loser: CanonicalRecord,
) -> tuple[CanonicalRecord, tuple[str, ...]]:
    """Copy metadata the survivor lacks from the loser.

    Empty text fields are filled, tracks only when the survivor has none, and the
    larger cover image wins.
    """

    changes: dict[str, object] = {}
    for name in _FILLABLE_TEXT_FIELDS:
        current = getattr(survivor, name)
        candidate = getattr(loser, name)
        if is_blank(current) and not is_blank(candidate):
            changes[name] = candidate
    if not survivor.tracks and loser.tracks:
        changes["tracks"] = loser.tracks
    if loser.cover_image is not None and loser.cover_image.size > 0:
        current_size = survivor.cover_image.size if survivor.cover_image is not None else 0
        if loser.cover_image.size > current_size:
            changes["cover_image"] = loser.cover_image
    if not changes:
        return survivor, ()
    return replace(survivor, **changes), tuple(changes)


class CatalogCurator:
    """Apply operator decisions atomically through a unit of work."""

    def __init__(self, unit_of_work_factory: Callable[[], CatalogUnitOfWork]) -> None:
        self._uow_factory = unit_of_work_factory

    def merge(self, survivor_id: str, loser_id: str) -> MergeResult:
        """Fold ``loser_id`` into ``survivor_id`` and delete the loser."""

        _require_distinct_ids(survivor_id, loser_id)

        with self._uow_factory() as uow:
            repositories = uow.repositories
            survivor = _require_record(repositories, survivor_id, role="survivor")
            loser = _require_record(repositories, loser_id, role="merged")

            merged, filled = fill_missing_metadata(survivor, loser)
            if filled:
                repositories.albums.update(merged)
            result = self._repoint_and_delete(repositories, loser_id, survivor_id, filled)
            uow.commit()

        log.info(
            "Merged album %s into %s: moved=%s filled=%s",
            loser_id,
            survivor_id,
            result.references_moved,
            ",".join(result.filled_fields) or "-",
        )
        return result

    def merge_manual(self, manual_id: str, canonical_id: str) -> MergeResult:
        """Repoint a manual album's references to a canonical album and remove it."""

        _require_distinct_ids(manual_id, canonical_id)
        if not is_manual_id(manual_id):
            raise InvalidInputError(f"{manual_id} is not a manual album id")
        if is_manual_id(canonical_id):
            raise InvalidInputError("A manual album cannot be merged into another manual album")

        with self._uow_factory() as uow:
            repositories = uow.repositories
            _require_record(repositories, canonical_id, role="canonical")
            _require_record(repositories, manual_id, role="manual")
            result = self._repoint_and_delete(repositories, manual_id, canonical_id, ())
            uow.commit()

        log.info(
            "Reconciled manual album %s into %s (%s references)",
            manual_id,
            canonical_id,
            result.references_moved,
        )
        return result

    def mark_distinct(self, album_id_a: str, album_id_b: str) -> bool:
        """Record that two albums are not duplicates; returns whether the pair is new."""

        pair = ExclusionPair.of(album_id_a, album_id_b)
        with self._uow_factory() as uow:
            repositories = uow.repositories
            for album_id in (pair.first, pair.second):
                if not repositories.albums.exists(album_id):
                    raise IntegrityViolationError(
                        f"Cannot mark distinct: album {album_id} does not exist"
                    )
            inserted = repositories.exclusions.insert(pair)
            uow.commit()

        log.info("Marked %s / %s as distinct (new=%s)", pair.first, pair.second, inserted)
        return inserted

    def skip_manual(self, manual_id: str, canonical_id: str) -> bool:
        """Stop suggesting ``canonical_id`` for this manual album only."""

        if not is_manual_id(manual_id):
            raise InvalidInputError(f"{manual_id} is not a manual album id")
        return self.mark_distinct(manual_id, canonical_id)

    def unmark_distinct(self, album_id_a: str, album_id_b: str) -> bool:
        pair = ExclusionPair.of(album_id_a, album_id_b)
        with self._uow_factory() as uow:
            removed = uow.repositories.exclusions.delete(pair)
            uow.commit()
        return removed

    def list_exclusions(self) -> list[ExclusionPair]:
        with self._uow_factory() as uow:
            return sorted(uow.repositories.exclusions.list_all())

    def delete_orphaned_references(self, album_id: str) -> int:
        """Delete list entries that point at an album missing from the catalog."""

        if is_blank(album_id):
            raise InvalidInputError("album id is required")

        with self._uow_factory() as uow:
            repositories = uow.repositories
            if repositories.albums.exists(album_id):
                raise IntegrityViolationError(
                    f"Album {album_id} exists; its references are not orphaned"
                )
            deleted = repositories.entries.delete_for_album(album_id)
            uow.commit()

        log.info("Deleted %s orphaned references to %s", deleted, album_id)
        return deleted

    @staticmethod
    def _repoint_and_delete(
        repositories: CatalogRepositories,
        loser_id: str,
        survivor_id: str,
        filled: tuple[str, ...],
    ) -> MergeResult:
        moved = repositories.entries.reassign(loser_id, survivor_id)
        removed = repositories.exclusions.delete_involving(loser_id)
        repositories.albums.delete(loser_id)
        remaining = repositories.entries.count_references(loser_id)
        if remaining:
            raise IntegrityViolationError(
                f"Merge would orphan {remaining} references to album {loser_id}"
            )
        return MergeResult(
            survivor_id=survivor_id,
            loser_id=loser_id,
            references_moved=moved,
            exclusions_removed=removed,
            filled_fields=filled,
        )


def _require_distinct_ids(album_id_a: str, album_id_b: str) -> None:
    if is_blank(album_id_a) or is_blank(album_id_b):
        raise InvalidInputError("Both album ids are required")
    if album_id_a == album_id_b:
        raise InvalidInputError("Cannot merge an album with itself")


def _require_record(
    repositories: CatalogRepositories,
    album_id: str,
    *,
    role: str,
) -> CanonicalRecord:
    record = repositories.albums.get(album_id)
    if record is None:
        raise IntegrityViolationError(f"The {role} album {album_id} does not exist")
    return record
