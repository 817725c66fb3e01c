from .models import ErrorKind, OperationResult, OperationStatus, RunReport
from .runner import CatalogRunner, RunnerState, run

__all__ = [
    "CatalogRunner",
    "ErrorKind",
    "OperationResult",
    "OperationStatus",
    "RunReport",
    "RunnerState",
    "run",
]
