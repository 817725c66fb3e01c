from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runner.models import ErrorKind


class QueryCatError(Exception):
    """Base exception for querycat errors."""


class CatalogError(QueryCatError, ValueError):
    """An operation spec or catalog selection is invalid."""


class StoreConnectionError(QueryCatError):
    """Failed to acquire the store connection. Fatal for a run."""


class OperationError(QueryCatError):
    """
    A single catalog operation failed inside the store.

    Never propagated past the runner; converted into a failed OperationResult.
    """

    def __init__(self, kind: "ErrorKind", message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class ReleaseError(QueryCatError):
    """Failed to close the store connection."""
