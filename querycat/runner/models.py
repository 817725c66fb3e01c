from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator

from ..catalog.models import OperationKind


class OperationStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    STORE_REJECTED = "store_rejected"
    INDEX_CONFLICT = "index_conflict"
    MALFORMED_PIPELINE = "malformed_pipeline"
    GENERIC_DRIVER_ERROR = "generic_driver_error"
    TIMEOUT = "timeout"


@dataclass
class OperationResult:
    """
    Outcome of one catalog operation.

    payload is set when status is OK; error_kind and message when FAILED.
    """
    name: str
    kind: OperationKind
    status: OperationStatus
    payload: Any = None
    error_kind: ErrorKind | None = None
    message: str | None = None
    latency_s: float = 0.0

    @classmethod
    def success(
        cls, name: str, kind: OperationKind, payload: Any, latency_s: float = 0.0
    ) -> "OperationResult":
        return cls(name, kind, OperationStatus.OK, payload=payload, latency_s=latency_s)

    @classmethod
    def failure(
        cls,
        name: str,
        kind: OperationKind,
        error_kind: ErrorKind,
        message: str,
        latency_s: float = 0.0,
    ) -> "OperationResult":
        return cls(
            name,
            kind,
            OperationStatus.FAILED,
            error_kind=error_kind,
            message=message,
            latency_s=latency_s,
        )

    @property
    def ok(self) -> bool:
        return self.status == OperationStatus.OK

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "kind": self.kind.value,
            "status": self.status.value,
        }
        if self.ok:
            data["payload"] = self.payload
        else:
            data["error_kind"] = self.error_kind.value if self.error_kind else None
            data["message"] = self.message
        return data


@dataclass
class RunReport:
    """
    Ordered results of one run, one entry per catalog operation.

    warnings carries best-effort notes (e.g. a failed connection release)
    that never change the results themselves.
    """
    catalog_name: str
    results: list[OperationResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def __iter__(self) -> Iterator[OperationResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> OperationResult:
        return self.results[index]

    @property
    def succeeded(self) -> list[OperationResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[OperationResult]:
        return [r for r in self.results if not r.ok]

    @property
    def all_ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "catalog": self.catalog_name,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "results": [r.to_dict() for r in self.results],
            "warnings": list(self.warnings),
            "summary": {
                "total": len(self.results),
                "ok": len(self.succeeded),
                "failed": len(self.failed),
            },
        }
