"""SQLAlchemy adapter package for albumid."""

from __future__ import annotations

from .mappings import create_all_tables, metadata
from .repositories import (
    SqlAlchemyCatalogRepository,
    SqlAlchemyExclusionRepository,
    SqlAlchemyListEntryRepository,
    SqlAlchemyListRepository,
)
from .unit_of_work import SqlAlchemyCatalogUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyCatalogRepository",
    "SqlAlchemyCatalogUnitOfWork",
    "SqlAlchemyExclusionRepository",
    "SqlAlchemyListEntryRepository",
    "SqlAlchemyListRepository",
    "create_all_tables",
    "metadata",
    "shutdown",
    "startup",
]
