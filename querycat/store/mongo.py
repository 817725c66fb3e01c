from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Sequence

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from ..catalog.models import OperationKind
from ..config import StoreConfig
from ..errors import OperationError, ReleaseError, StoreConnectionError
from ..runner.models import ErrorKind

logger = logging.getLogger(__name__)

# Server error codes for createIndex against an existing, differently defined index
INDEX_OPTIONS_CONFLICT = 85
INDEX_KEY_SPECS_CONFLICT = 86


def classify_driver_error(kind: OperationKind, exc: PyMongoError) -> ErrorKind:
    """Map a pymongo exception raised by a catalog operation to an ErrorKind."""
    if kind == OperationKind.CREATE_INDEX:
        if isinstance(exc, DuplicateKeyError):
            return ErrorKind.INDEX_CONFLICT
        if isinstance(exc, OperationFailure) and exc.code in (
            INDEX_OPTIONS_CONFLICT,
            INDEX_KEY_SPECS_CONFLICT,
        ):
            return ErrorKind.INDEX_CONFLICT
    if isinstance(exc, OperationFailure):
        if kind == OperationKind.AGGREGATE:
            return ErrorKind.MALFORMED_PIPELINE
        return ErrorKind.STORE_REJECTED
    return ErrorKind.GENERIC_DRIVER_ERROR


class MongoStore:
    """
    StoreHandle backed by a single pymongo collection.

    The client is created in connect() and closed in close(); the store is
    single-use, like a transaction.

    Usage:
        store = MongoStore(StoreConfig(uri="mongodb://localhost:27017"))
        report = run(bookstore_catalog(), store)
    """

    def __init__(
        self,
        config: StoreConfig,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        self._client: MongoClient | None = None
        self._collection: Collection | None = None
        self._closed = False

    def connect(self) -> None:
        """
        Create the client and verify the server answers a ping.

        Raises:
            RuntimeError: If the store was already connected or closed
            StoreConnectionError: If the server cannot be reached
        """
        if self._client is not None or self._closed:
            raise RuntimeError("MongoStore is single-use; connect() may only be called once")

        client = None
        try:
            client = self._client_factory(
                self.config.uri,
                serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
            )
            client.admin.command("ping")
        except PyMongoError as exc:
            if client is not None:
                client.close()
            raise StoreConnectionError(
                f"Could not connect to MongoDB at {self.config.uri}: {exc}"
            ) from exc

        self._client = client
        db: Database = client[self.config.database]
        self._collection = db[self.config.collection]
        logger.info(
            "Connected to MongoDB database=%s collection=%s",
            self.config.database,
            self.config.collection,
        )

    def close(self) -> None:
        """
        Close the client. Closing an unconnected or closed store is a no-op.

        Raises:
            ReleaseError: If the driver fails while closing
        """
        client = self._client
        self._client = None
        self._collection = None
        self._closed = True
        if client is None:
            return
        try:
            client.close()
        except PyMongoError as exc:
            raise ReleaseError(f"Failed to close MongoDB client: {exc}") from exc
        logger.info("MongoDB connection closed")

    def _coll(self) -> Collection:
        if self._collection is None:
            raise RuntimeError("MongoStore is not connected; call connect() first")
        return self._collection

    @contextmanager
    def _translate(self, kind: OperationKind) -> Iterator[None]:
        try:
            yield
        except PyMongoError as exc:
            raise OperationError(classify_driver_error(kind, exc), str(exc)) from exc

    def find(
        self,
        filter: Mapping[str, Any],
        *,
        projection: Mapping[str, Any] | None = None,
        sort: Mapping[str, int] | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        coll = self._coll()
        with self._translate(OperationKind.FIND):
            cursor = coll.find(
                filter,
                projection=projection,
                sort=list(sort.items()) if sort else None,
                skip=skip,
                limit=limit,
            )
            return list(cursor)

    def update_one(
        self, filter: Mapping[str, Any], update: Mapping[str, Any]
    ) -> dict[str, int]:
        coll = self._coll()
        with self._translate(OperationKind.UPDATE_ONE):
            result = coll.update_one(filter, update)
        return {"matched": result.matched_count, "modified": result.modified_count}

    def delete_one(self, filter: Mapping[str, Any]) -> dict[str, int]:
        coll = self._coll()
        with self._translate(OperationKind.DELETE_ONE):
            result = coll.delete_one(filter)
        return {"deleted": result.deleted_count}

    def aggregate(self, pipeline: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        coll = self._coll()
        with self._translate(OperationKind.AGGREGATE):
            return list(coll.aggregate(list(pipeline)))

    def create_index(self, keys: Mapping[str, int]) -> str:
        coll = self._coll()
        with self._translate(OperationKind.CREATE_INDEX):
            return coll.create_index(list(keys.items()))

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
        """
        Run the explain command for the equivalent find.

        Cursor.explain() does not accept a verbosity, so the find command is
        built here and wrapped in explain directly.
        """
        coll = self._coll()
        find_cmd: dict[str, Any] = {"find": coll.name, "filter": dict(filter)}
        if projection:
            find_cmd["projection"] = dict(projection)
        if sort:
            find_cmd["sort"] = dict(sort)
        if skip:
            find_cmd["skip"] = skip
        if limit:
            find_cmd["limit"] = limit

        with self._translate(OperationKind.EXPLAIN):
            return dict(coll.database.command("explain", find_cmd, verbosity=verbosity))
