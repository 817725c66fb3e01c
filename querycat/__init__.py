from .catalog import Catalog, OperationKind, OperationSpec, bookstore_catalog
from .runner import CatalogRunner, ErrorKind, OperationStatus, RunReport, run
from .store import MongoStore, StoreHandle

__all__ = [
    "Catalog",
    "CatalogRunner",
    "ErrorKind",
    "MongoStore",
    "OperationKind",
    "OperationSpec",
    "OperationStatus",
    "RunReport",
    "StoreHandle",
    "bookstore_catalog",
    "run",
]
