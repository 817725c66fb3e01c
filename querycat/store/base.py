from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class StoreHandle(Protocol):
    """
    Protocol for the document store a catalog runs against.

    The runner calls connect() once, then the query methods sequentially,
    then close() once. Implementations report per-call failures by raising
    OperationError (or any other exception, treated as a generic driver
    error) and connection failures by raising StoreConnectionError.
    """

    def connect(self) -> None:
        """Acquire the connection. Must release partial setup on failure."""
        ...

    def close(self) -> None:
        """Release the connection."""
        ...

    def find(
        self,
        filter: Mapping[str, Any],
        *,
        projection: Mapping[str, Any] | None = None,
        sort: Mapping[str, int] | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """Return every matching record."""
        ...

    def update_one(
        self, filter: Mapping[str, Any], update: Mapping[str, Any]
    ) -> dict[str, int]:
        """Update the first match; return {"matched": n, "modified": n}."""
        ...

    def delete_one(self, filter: Mapping[str, Any]) -> dict[str, int]:
        """Delete the first match; return {"deleted": n}."""
        ...

    def aggregate(self, pipeline: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        """Run the pipeline stages in order over the whole collection."""
        ...

    def create_index(self, keys: Mapping[str, int]) -> str:
        """Create an index over keys (field -> 1/-1) and return its name."""
        ...

    def explain(
        self,
        filter: Mapping[str, Any],
        *,
        projection: Mapping[str, Any] | None = None,
        sort: Mapping[str, int] | None = None,
        skip: int = 0,
        limit: int = 0,
        verbosity: str = "executionStats",
    ) -> dict[str, Any]:
        """Return the execution plan of the equivalent find."""
        ...
