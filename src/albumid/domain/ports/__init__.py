"""Domain ports (interfaces) for adapters."""

from __future__ import annotations

from .fetching import Clock
from .persistence import (
    CatalogLookup,
    CatalogRepository,
    ExclusionRepository,
    ListEntryRepository,
    ListRepository,
)
from .unit_of_work import CatalogRepositories, CatalogUnitOfWork, RepositoryCollection, UnitOfWork

__all__ = [
    "CatalogLookup",
    "CatalogRepositories",
    "CatalogRepository",
    "CatalogUnitOfWork",
    "Clock",
    "ExclusionRepository",
    "ListEntryRepository",
    "ListRepository",
    "RepositoryCollection",
    "UnitOfWork",
]
