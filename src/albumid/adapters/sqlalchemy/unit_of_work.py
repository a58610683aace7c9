"""SQLAlchemy-backed unit of work for the album catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from albumid.adapters.sqlalchemy.mappings import create_all_tables
from albumid.adapters.sqlalchemy.repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyExclusionRepository,
    SqlAlchemyListEntryRepository,
    SqlAlchemyListRepository,
)
from albumid.config.storage import get_database_config
from albumid.domain.ports.unit_of_work import CatalogRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine


class StartupError(RuntimeError):
    """Raised when the catalog store is used before ``startup`` or started twice."""


class _CatalogStore:
    """The process-wide engine and the session factory bound to it."""

    def __init__(self) -> None:
        self.engine: Engine | None = None
        self.sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def release(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None

    def open_session(self) -> Session:
        if self.sessions is None:
            raise StartupError("Catalog store is not started; call startup() first")
        return self.sessions()


_STORE = _CatalogStore()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the catalog store to ``engine`` (or a new one) and create missing tables."""

    if _STORE.engine is not None and not force:
        raise StartupError("Catalog store already started; pass force=True to rebind")

    target = engine or create_engine(database_uri or get_database_config().uri, future=True)
    create_all_tables(target)
    _STORE.bind(target)


def is_started() -> bool:
    return _STORE.engine is not None


def shutdown() -> None:
    _STORE.release()


class SqlAlchemyCatalogUnitOfWork:
    """One session spanning albums, lists, list entries and exclusions.

    Leaving the ``with`` block after an exception rolls back; changes persist only
    through an explicit :meth:`commit`.
    """

    def __init__(self) -> None:
        if not is_started():
            raise StartupError("Catalog store is not started; call startup() first")
        self._session: Session | None = None
        self._repositories: CatalogRepositories | None = None

    def __enter__(self) -> SqlAlchemyCatalogUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work is already open")
        session = _STORE.open_session()
        self._session = session
        self._repositories = CatalogRepositories(
            albums=SqlAlchemyCatalogRepository(session),
            lists=SqlAlchemyListRepository(session),
            entries=SqlAlchemyListEntryRepository(session),
            exclusions=SqlAlchemyExclusionRepository(session),
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        session = self.session
        try:
            if exc_type is not None:
                session.rollback()
        finally:
            session.close()
            self._session = None
            self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work is not open")
        return self._session

    @property
    def repositories(self) -> CatalogRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work is not open")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


if TYPE_CHECKING:
    from albumid.domain.ports.unit_of_work import CatalogUnitOfWork

    _uow_check: CatalogUnitOfWork = SqlAlchemyCatalogUnitOfWork()
