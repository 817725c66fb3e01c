from .bookstore import bookstore_catalog
from .models import ASCENDING, DESCENDING, Catalog, OperationKind, OperationSpec

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "Catalog",
    "OperationKind",
    "OperationSpec",
    "bookstore_catalog",
]
