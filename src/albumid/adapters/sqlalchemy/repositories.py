"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from itertools import batched
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import SQLAlchemyError

from albumid.adapters.sqlalchemy.mappings import (
    albums_table,
    distinct_pairs_table,
    list_entries_table,
    lists_table,
)
from albumid.domain.errors import CatalogLookupError
from albumid.domain.identity.exclusions import ExclusionPair
from albumid.domain.model import CanonicalRecord, CoverImage, ListEntry, ListUsage, MusicList

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from sqlalchemy.orm import Session

# stays well below SQLite's bound-parameter limit
_IN_CLAUSE_CHUNK = 500


class SqlAlchemyCatalogRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def bulk_fetch_by_id(self, ids: Sequence[str]) -> list[CanonicalRecord]:
        unique = [album_id for album_id in dict.fromkeys(ids) if album_id]
        records: list[CanonicalRecord] = []
        try:
            for chunk in batched(unique, _IN_CLAUSE_CHUNK):
                stmt = select(albums_table).where(albums_table.c.id.in_(chunk))
                rows = self.session.execute(stmt).mappings()
                records.extend(_record_from_row(row) for row in rows)
        except SQLAlchemyError as exc:
            raise CatalogLookupError(f"Bulk lookup of {len(unique)} albums failed") from exc
        return records

    def get(self, album_id: str) -> CanonicalRecord | None:
        try:
            row = (
                self.session.execute(select(albums_table).where(albums_table.c.id == album_id))
                .mappings()
                .one_or_none()
            )
        except SQLAlchemyError as exc:
            raise CatalogLookupError(f"Lookup of album {album_id} failed") from exc
        return _record_from_row(row) if row is not None else None

    def exists(self, album_id: str) -> bool:
        stmt = select(albums_table.c.id).where(albums_table.c.id == album_id)
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def list_all(self) -> list[CanonicalRecord]:
        stmt = select(albums_table).order_by(albums_table.c.id)
        return [_record_from_row(row) for row in self.session.execute(stmt).mappings()]

    def add(self, record: CanonicalRecord) -> None:
        self.session.execute(insert(albums_table).values(**_record_values(record)))

    def update(self, record: CanonicalRecord) -> None:
        values = _record_values(record)
        values.pop("id")
        stmt = update(albums_table).where(albums_table.c.id == record.id).values(**values)
        self.session.execute(stmt)

    def delete(self, album_id: str) -> int:
        result = self.session.execute(delete(albums_table).where(albums_table.c.id == album_id))
        return result.rowcount


class SqlAlchemyListRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, music_list: MusicList) -> None:
        self.session.execute(
            insert(lists_table).values(
                id=music_list.id,
                name=music_list.name,
                year=music_list.year,
                owner=music_list.owner,
            )
        )

    def get(self, list_id: str) -> MusicList | None:
        row = (
            self.session.execute(select(lists_table).where(lists_table.c.id == list_id))
            .mappings()
            .one_or_none()
        )
        if row is None:
            return None
        return MusicList(id=row["id"], name=row["name"], year=row["year"], owner=row["owner"])

    def delete(self, list_id: str) -> int:
        """Delete a list together with its entries."""

        self.session.execute(
            delete(list_entries_table).where(list_entries_table.c.list_id == list_id)
        )
        result = self.session.execute(delete(lists_table).where(lists_table.c.id == list_id))
        return result.rowcount


class SqlAlchemyListEntryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entry: ListEntry) -> int:
        values = {
            "list_id": entry.list_id,
            "album_id": entry.album_id,
            "position": entry.position,
            "artist": entry.artist,
            "title": entry.title,
            "release_date": entry.release_date,
            "country": entry.country,
            "cover_image": entry.cover_image,
            "cover_image_format": entry.cover_image_format,
            "tracks": entry.tracks,
        }
        if entry.id is not None:
            values["id"] = entry.id
        result = self.session.execute(insert(list_entries_table).values(**values))
        return int(result.inserted_primary_key[0])

    def for_list(self, list_id: str) -> list[ListEntry]:
        stmt = (
            select(list_entries_table)
            .where(list_entries_table.c.list_id == list_id)
            .order_by(list_entries_table.c.position, list_entries_table.c.id)
        )
        return [_entry_from_row(row) for row in self.session.execute(stmt).mappings()]

    def reassign(self, from_album_id: str, to_album_id: str) -> int:
        stmt = (
            update(list_entries_table)
            .where(list_entries_table.c.album_id == from_album_id)
            .values(album_id=to_album_id)
        )
        return self.session.execute(stmt).rowcount

    def count_references(self, album_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(list_entries_table)
            .where(list_entries_table.c.album_id == album_id)
        )
        return int(self.session.execute(stmt).scalar_one())

    def delete_for_album(self, album_id: str) -> int:
        stmt = delete(list_entries_table).where(list_entries_table.c.album_id == album_id)
        return self.session.execute(stmt).rowcount

    def usages(self, album_ids: Iterable[str]) -> dict[str, list[ListUsage]]:
        wanted = list(dict.fromkeys(album_ids))
        usages: dict[str, list[ListUsage]] = {}
        for chunk in batched(wanted, _IN_CLAUSE_CHUNK):
            stmt = (
                select(
                    list_entries_table.c.album_id,
                    lists_table.c.id,
                    lists_table.c.name,
                    lists_table.c.year,
                    lists_table.c.owner,
                )
                .select_from(
                    list_entries_table.join(
                        lists_table, lists_table.c.id == list_entries_table.c.list_id
                    )
                )
                .where(list_entries_table.c.album_id.in_(chunk))
                .distinct()
                .order_by(lists_table.c.year.desc(), lists_table.c.name)
            )
            for album_id, list_id, name, year, owner in self.session.execute(stmt):
                usages.setdefault(album_id, []).append(
                    ListUsage(list_id=list_id, list_name=name, year=year, owner=owner)
                )
        return usages

    def orphaned_album_ids(self) -> dict[str, int]:
        stmt = (
            select(list_entries_table.c.album_id, func.count())
            .select_from(
                list_entries_table.outerjoin(
                    albums_table, albums_table.c.id == list_entries_table.c.album_id
                )
            )
            .where(list_entries_table.c.album_id.is_not(None))
            .where(albums_table.c.id.is_(None))
            .group_by(list_entries_table.c.album_id)
        )
        return {album_id: int(count) for album_id, count in self.session.execute(stmt)}

    def dangling_list_ids(self) -> dict[str, int]:
        stmt = (
            select(list_entries_table.c.list_id, func.count())
            .select_from(
                list_entries_table.outerjoin(
                    lists_table, lists_table.c.id == list_entries_table.c.list_id
                )
            )
            .where(lists_table.c.id.is_(None))
            .group_by(list_entries_table.c.list_id)
        )
        return {list_id: int(count) for list_id, count in self.session.execute(stmt)}


class SqlAlchemyExclusionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def insert(self, pair: ExclusionPair) -> bool:
        stmt = (
            distinct_pairs_table.insert()
            .prefix_with("OR IGNORE")
            .values(album_id_1=pair.first, album_id_2=pair.second)
        )
        return self.session.execute(stmt).rowcount == 1

    def delete(self, pair: ExclusionPair) -> bool:
        stmt = (
            delete(distinct_pairs_table)
            .where(distinct_pairs_table.c.album_id_1 == pair.first)
            .where(distinct_pairs_table.c.album_id_2 == pair.second)
        )
        return self.session.execute(stmt).rowcount > 0

    def contains(self, pair: ExclusionPair) -> bool:
        stmt = (
            select(distinct_pairs_table.c.album_id_1)
            .where(distinct_pairs_table.c.album_id_1 == pair.first)
            .where(distinct_pairs_table.c.album_id_2 == pair.second)
        )
        return self.session.execute(stmt).first() is not None

    def list_all(self) -> list[ExclusionPair]:
        stmt = select(distinct_pairs_table.c.album_id_1, distinct_pairs_table.c.album_id_2)
        return [
            ExclusionPair(first=first, second=second)
            for first, second in self.session.execute(stmt)
        ]

    def delete_involving(self, album_id: str) -> int:
        stmt = delete(distinct_pairs_table).where(
            or_(
                distinct_pairs_table.c.album_id_1 == album_id,
                distinct_pairs_table.c.album_id_2 == album_id,
            )
        )
        return self.session.execute(stmt).rowcount


def _record_from_row(row: Mapping[str, Any]) -> CanonicalRecord:
    cover = row["cover_image"]
    return CanonicalRecord(
        id=row["id"],
        artist=row["artist"] or "",
        title=row["title"] or "",
        release_date=row["release_date"],
        country=row["country"],
        genre_1=row["genre_1"],
        genre_2=row["genre_2"],
        tracks=row["tracks"] or (),
        cover_image=CoverImage(data=bytes(cover), format=row["cover_image_format"])
        if cover
        else None,
        summary=row["summary"],
    )


def _record_values(record: CanonicalRecord) -> dict[str, object]:
    cover = record.cover_image
    return {
        "id": record.id,
        "artist": record.artist,
        "title": record.title,
        "release_date": record.release_date,
        "country": record.country,
        "genre_1": record.genre_1,
        "genre_2": record.genre_2,
        "tracks": record.tracks,
        "cover_image": cover.data if cover is not None else None,
        "cover_image_format": cover.format if cover is not None else None,
        "summary": record.summary,
    }


def _entry_from_row(row: Mapping[str, Any]) -> ListEntry:
    cover = row["cover_image"]
    return ListEntry(
        id=row["id"],
        list_id=row["list_id"],
        album_id=row["album_id"],
        position=row["position"],
        artist=row["artist"],
        title=row["title"],
        release_date=row["release_date"],
        country=row["country"],
        cover_image=bytes(cover) if cover is not None else None,
        cover_image_format=row["cover_image_format"],
        tracks=row["tracks"],
    )
