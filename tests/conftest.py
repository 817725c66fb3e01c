from __future__ import annotations

import copy
from typing import Any, Mapping, Sequence

import pytest

SAMPLE_BOOKS: list[dict[str, Any]] = [
    {"title": "1984", "author": "George Orwell", "genre": "Dystopian",
     "published_year": 1949, "price": 10.99, "in_stock": True},
    {"title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "Fiction",
     "published_year": 1937, "price": 14.99, "in_stock": True},
    {"title": "Moby Dick", "author": "Herman Melville", "genre": "Fiction",
     "published_year": 1851, "price": 12.5, "in_stock": False},
    {"title": "Animal Farm", "author": "George Orwell", "genre": "Political Satire",
     "published_year": 1945, "price": 8.5, "in_stock": False},
    {"title": "The Alchemist", "author": "Paulo Coelho", "genre": "Fiction",
     "published_year": 1988, "price": 10.5, "in_stock": True},
]


def _matches(doc: Mapping[str, Any], filter: Mapping[str, Any]) -> bool:
    # equality only; enough for the catalogs used in tests
    return all(doc.get(k) == v for k, v in filter.items())


class RecordingStore:
    """
    In-memory StoreHandle double.

    Records every call in ``calls`` as (method, args). ``fail_at`` maps the
    zero-based index of an operation call to the exception it raises;
    ``fail_methods`` maps a method name to an exception raised on every call.
    """

    def __init__(
        self,
        records: Sequence[Mapping[str, Any]] | None = None,
        *,
        connect_error: BaseException | None = None,
        close_error: BaseException | None = None,
        aggregate_result: list[dict[str, Any]] | None = None,
    ) -> None:
        self.records = copy.deepcopy(list(SAMPLE_BOOKS if records is None else records))
        self.connect_error = connect_error
        self.close_error = close_error
        self.aggregate_result = aggregate_result if aggregate_result is not None else []
        self.fail_at: dict[int, BaseException] = {}
        self.fail_methods: dict[str, BaseException] = {}
        self.calls: list[tuple[str, tuple]] = []
        self.connect_calls = 0
        self.close_calls = 0
        self.connected = False

    @property
    def operation_calls(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _record(self, method: str, *args: Any) -> None:
        index = len(self.calls)
        self.calls.append((method, args))
        if index in self.fail_at:
            raise self.fail_at[index]
        if method in self.fail_methods:
            raise self.fail_methods[method]

    def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    def close(self) -> None:
        self.close_calls += 1
        self.connected = False
        if self.close_error is not None:
            raise self.close_error

    def find(self, filter, *, projection=None, sort=None, skip=0, limit=0):
        self._record("find", filter, projection, sort, skip, limit)
        docs = [copy.deepcopy(d) for d in self.records if _matches(d, filter)]
        for key, direction in reversed(list((sort or {}).items())):
            docs.sort(key=lambda d: d.get(key), reverse=direction == -1)
        docs = docs[skip:]
        if limit:
            docs = docs[:limit]
        if projection:
            docs = [{k: d[k] for k, v in projection.items() if v and k in d} for d in docs]
        return docs

    def update_one(self, filter, update):
        self._record("update_one", filter, update)
        for doc in self.records:
            if _matches(doc, filter):
                changes = update.get("$set", {})
                modified = any(doc.get(k) != v for k, v in changes.items())
                doc.update(changes)
                return {"matched": 1, "modified": int(modified)}
        return {"matched": 0, "modified": 0}

    def delete_one(self, filter):
        self._record("delete_one", filter)
        for i, doc in enumerate(self.records):
            if _matches(doc, filter):
                del self.records[i]
                return {"deleted": 1}
        return {"deleted": 0}

    def aggregate(self, pipeline):
        self._record("aggregate", pipeline)
        return copy.deepcopy(self.aggregate_result)

    def create_index(self, keys):
        self._record("create_index", keys)
        return "_".join(f"{k}_{v}" for k, v in keys.items())

    def explain(self, filter, *, projection=None, sort=None, skip=0, limit=0,
                verbosity="executionStats"):
        self._record("explain", filter, projection, sort, skip, limit, verbosity)
        return {"queryPlanner": {"parsedQuery": dict(filter)}, "verbosity": verbosity}


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def store_factory():
    """
    Factory fixture for RecordingStore instances with custom setup.

    Usage:
        store = store_factory(close_error=RuntimeError("boom"))
    """
    def _create(*args: Any, **kwargs: Any) -> RecordingStore:
        return RecordingStore(*args, **kwargs)

    return _create
