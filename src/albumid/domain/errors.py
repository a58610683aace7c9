"""Error taxonomy shared by the identity subsystem."""

from __future__ import annotations


class AlbumIdentityError(Exception):
    """Base class for album identity failures that callers must see."""


class InvalidInputError(AlbumIdentityError, ValueError):
    """Raised synchronously for malformed arguments, before any I/O happens."""


class IntegrityViolationError(AlbumIdentityError):
    """Raised when an operation would corrupt catalog references."""


class CatalogLookupError(AlbumIdentityError):
    """Raised by the storage boundary when a catalog read fails."""
