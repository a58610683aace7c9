"""SQLAlchemy table metadata for the album catalog, lists and exclusions."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Dialect,
    Integer,
    LargeBinary,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
)

from albumid.domain.model import Track

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class TrackListType(TypeDecorator[tuple[Track, ...]]):
    """Stores a catalog track list as a JSON array of ``{name, length}`` objects."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: tuple[Track, ...] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if not value:
            return None
        return json.dumps([track.as_dict() for track in value], ensure_ascii=False)

    def process_result_value(self, value: str | None, dialect: Dialect) -> tuple[Track, ...]:
        _ = dialect
        if value is None:
            return ()
        try:
            loaded = json.loads(value)
        except json.JSONDecodeError:
            log.warning("Ignoring unreadable track list: %r", value[:80])
            return ()
        if not isinstance(loaded, list):
            return ()
        tracks: list[Track] = []
        for item in cast(list[Any], loaded):
            if isinstance(item, dict) and isinstance(item.get("name"), str):
                length = item.get("length")
                if not isinstance(length, int):
                    length = None
                tracks.append(Track(name=item["name"], length=length))
        return tuple(tracks)


albums_table = Table(
    "albums",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("artist", String(512), nullable=False, default=""),
    Column("title", String(512), nullable=False, default=""),
    Column("release_date", String(32), nullable=True),
    Column("country", String(128), nullable=True),
    Column("genre_1", String(128), nullable=True),
    Column("genre_2", String(128), nullable=True),
    Column("tracks", TrackListType(), nullable=True),
    Column("cover_image", LargeBinary, nullable=True),
    Column("cover_image_format", String(32), nullable=True),
    Column("summary", Text, nullable=True),
)

lists_table = Table(
    "lists",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(256), nullable=False),
    Column("year", Integer, nullable=True),
    Column("owner", String(128), nullable=True),
)

list_entries_table = Table(
    "list_entries",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("list_id", String(64), nullable=False, index=True),
    Column("album_id", String(64), nullable=True, index=True),
    Column("position", Integer, nullable=False, default=0),
    Column("artist", String(512), nullable=True),
    Column("title", String(512), nullable=True),
    Column("release_date", String(32), nullable=True),
    Column("country", String(128), nullable=True),
    Column("cover_image", LargeBinary, nullable=True),
    Column("cover_image_format", String(32), nullable=True),
    Column("tracks", Text, nullable=True),
)

distinct_pairs_table = Table(
    "distinct_pairs",
    metadata,
    Column("album_id_1", String(64), primary_key=True),
    Column("album_id_2", String(64), primary_key=True),
    Column("created_at", UTCDateTime(), nullable=False, default=lambda: datetime.now(UTC)),
    CheckConstraint("album_id_1 < album_id_2", name="ordered"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the catalog metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
