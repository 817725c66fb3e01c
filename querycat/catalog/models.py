from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Sequence

from ..errors import CatalogError

ASCENDING = 1
DESCENDING = -1
DEFAULT_EXPLAIN_VERBOSITY = "executionStats"


class OperationKind(str, Enum):
    FIND = "find"
    UPDATE_ONE = "update_one"
    DELETE_ONE = "delete_one"
    AGGREGATE = "aggregate"
    CREATE_INDEX = "create_index"
    EXPLAIN = "explain"


_QUERY_KINDS = (OperationKind.FIND, OperationKind.EXPLAIN)


def _check_directions(field: str, value: Mapping[str, Any]) -> None:
    for key, direction in value.items():
        # bool is an int subclass; True would otherwise pass as 1
        if isinstance(direction, bool) or direction not in (ASCENDING, DESCENDING):
            raise CatalogError(
                f"{field} direction for {key!r} must be 1 (ascending) or -1 (descending), "
                f"got {direction!r}"
            )


def _normalize_update(update: Mapping[str, Any]) -> dict[str, Any]:
    """
    Give a plain field mapping set semantics.

    {"price": 17.99} becomes {"$set": {"price": 17.99}}. A mapping made only of
    update operators is passed through unchanged.
    """
    operators = [k for k in update if k.startswith("$")]
    if not operators:
        return {"$set": dict(update)}
    if len(operators) != len(update):
        raise CatalogError(
            "update mixes operator keys and plain fields: "
            f"{sorted(update)!r}"
        )
    return dict(update)


@dataclass(frozen=True)
class OperationSpec:
    """
    A single declarative catalog operation.

    Mapping and sequence parameters are deep-copied on construction so that
    later mutation of the caller's objects cannot change the OperationSpec.

    Specs compare by value but are not hashable; their parameters are dicts.
    """
    __hash__ = None  # type: ignore[assignment]

    name: str
    kind: OperationKind
    filter: Mapping[str, Any] | None = None
    update: Mapping[str, Any] | None = None
    pipeline: Sequence[Mapping[str, Any]] | None = None
    projection: Mapping[str, Any] | None = None
    sort: Mapping[str, int] | None = None
    limit: int = 0
    skip: int = 0
    index_keys: Mapping[str, int] | None = None
    # UpdateOne only: matching nothing is a failure instead of a zero count
    require_match: bool = False
    verbosity: str = DEFAULT_EXPLAIN_VERBOSITY

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise CatalogError("operation name must be a non-empty string")
        try:
            kind = OperationKind(self.kind)
        except ValueError as exc:
            raise CatalogError(f"Unknown operation kind: {self.kind!r}") from exc
        object.__setattr__(self, "kind", kind)

        for field in ("limit", "skip"):
            value = getattr(self, field)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise CatalogError(f"{field} must be a non-negative integer, got {value!r}")

        for field in ("filter", "update", "projection", "sort", "index_keys"):
            value = getattr(self, field)
            if value is None:
                continue
            if not isinstance(value, Mapping):
                raise CatalogError(f"{field} must be a mapping, got {type(value).__name__}")
            object.__setattr__(self, field, copy.deepcopy(dict(value)))

        if self.pipeline is not None:
            if not isinstance(self.pipeline, (list, tuple)):
                raise CatalogError(
                    f"pipeline must be a list of stages, got {type(self.pipeline).__name__}"
                )
            object.__setattr__(self, "pipeline", copy.deepcopy(list(self.pipeline)))

        if self.sort is not None:
            _check_directions("sort", self.sort)

        self._validate_for_kind()

    def _validate_for_kind(self) -> None:
        kind = self.kind
        if kind != OperationKind.UPDATE_ONE:
            if self.update is not None:
                raise CatalogError(f"{kind.value} operation {self.name!r} does not take an update")
            if self.require_match:
                raise CatalogError("require_match only applies to update_one operations")
        if kind != OperationKind.AGGREGATE and self.pipeline is not None:
            raise CatalogError(f"{kind.value} operation {self.name!r} does not take a pipeline")
        if kind != OperationKind.CREATE_INDEX and self.index_keys is not None:
            raise CatalogError(f"{kind.value} operation {self.name!r} does not take index_keys")
        if kind not in _QUERY_KINDS and (
            self.projection is not None or self.sort is not None or self.limit or self.skip
        ):
            raise CatalogError(
                f"projection/sort/limit/skip only apply to find and explain, not {kind.value}"
            )

        if kind == OperationKind.UPDATE_ONE:
            if not self.update:
                raise CatalogError(f"update_one operation {self.name!r} requires a non-empty update")
            object.__setattr__(self, "update", _normalize_update(self.update))
        elif kind == OperationKind.AGGREGATE:
            if self.pipeline is None:
                raise CatalogError(f"aggregate operation {self.name!r} requires a pipeline")
        elif kind == OperationKind.CREATE_INDEX:
            if not self.index_keys:
                raise CatalogError(
                    f"create_index operation {self.name!r} requires non-empty index_keys"
                )
            _check_directions("index_keys", self.index_keys)
        elif kind == OperationKind.EXPLAIN:
            if not self.verbosity:
                raise CatalogError("explain verbosity must be a non-empty string")


class Catalog:
    """
    Ordered collection of OperationSpec. Insertion order is execution order.

    Duplicate names are accepted; they produce duplicate report entries.
    """

    def __init__(self, name: str = "catalog", operations: Iterable[OperationSpec] = ()) -> None:
        self.name = name
        self._operations: list[OperationSpec] = []
        self.extend(operations)

    def add(self, spec: OperationSpec) -> "Catalog":
        if not isinstance(spec, OperationSpec):
            raise CatalogError(f"Catalog entries must be OperationSpec, got {type(spec).__name__}")
        self._operations.append(spec)
        return self

    def extend(self, specs: Iterable[OperationSpec]) -> "Catalog":
        for spec in specs:
            self.add(spec)
        return self

    def names(self) -> list[str]:
        return [op.name for op in self._operations]

    def select(self, names: Iterable[str]) -> "Catalog":
        """
        Return a new catalog holding only the named operations, in catalog order.

        Raises:
            CatalogError: If a name is not present in this catalog
        """
        wanted = set(names)
        unknown = wanted.difference(self.names())
        if unknown:
            raise CatalogError(f"Unknown operation name(s): {', '.join(sorted(unknown))}")
        return Catalog(self.name, (op for op in self._operations if op.name in wanted))

    def __iter__(self) -> Iterator[OperationSpec]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __getitem__(self, index: int) -> OperationSpec:
        return self._operations[index]

    def __repr__(self) -> str:
        return f"Catalog(name={self.name!r}, operations={len(self)})"
