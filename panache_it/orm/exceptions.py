"""Exceptions raised by the active-record layer."""

from __future__ import annotations


class PersistenceError(Exception):
    """Base class for active-record and repository failures."""


class NoResultError(PersistenceError):
    """Raised by Query.one() when the query matched nothing."""


class NonUniqueResultError(PersistenceError):
    """Raised by Query.one() when the query matched more than one row."""


class PagingError(PersistenceError):
    """Raised when page navigation is used on a query that is not paged."""


class UnknownFieldError(PersistenceError):
    """Raised when a sort field does not name a mapped attribute."""


class EntityTypeResolutionError(PersistenceError):
    """Raised when a repository cannot tell which entity class it manages."""
