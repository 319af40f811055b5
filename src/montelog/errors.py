"""Domain errors for Monte-Log.

Services raise these; the API layer maps them to HTTP responses
(see montelog.api.errors). Cache failures never appear here: they are
returned as CacheResult outcomes and handled where the cache is called.
"""

from __future__ import annotations


class MontelogError(Exception):
    """Base class for all domain errors."""


class NotFoundError(MontelogError):
    """A valid lookup matched no row."""

    def __init__(self, resource_type: str, identifier: object):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} with ID {identifier} not found")


class RejectedActionError(MontelogError):
    """The request is valid but the action is not allowed in the current state."""


class DuplicateActionError(RejectedActionError):
    """The action was already performed (e.g. liking a post twice)."""


class RepositoryError(MontelogError):
    """The database rejected or failed a query or write."""

    def __init__(self, operation: str, cause: BaseException | str):
        self.operation = operation
        super().__init__(f"{operation} failed: {cause}")


class UnauthorizedError(MontelogError):
    """Missing, expired or invalid session."""
