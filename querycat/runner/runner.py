from __future__ import annotations

import copy
import logging
import time
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterable

from ..catalog.models import Catalog, OperationKind, OperationSpec
from ..errors import OperationError, ReleaseError, StoreConnectionError
from .metrics import RUN_COMPLETED, RUN_CONNECTION_ERROR, observe_operation, observe_run
from .models import ErrorKind, OperationResult, OperationStatus, RunReport

if TYPE_CHECKING:
    from ..store.base import StoreHandle

logger = logging.getLogger(__name__)


class RunnerState(str, Enum):
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    CLOSED = "closed"


class CatalogRunner:
    """
    Executes a catalog against a store, one operation at a time, in order.

    Each operation is attempted exactly once and is fault-isolated: a failing
    operation becomes a FAILED result and the run continues. The only fatal
    condition is failing to connect, which raises StoreConnectionError before
    any operation runs.

    A runner is single-use: UNCONNECTED -> CONNECTED -> CLOSED. The store is
    closed exactly once on every path out of the operation loop.

    Usage:
        runner = CatalogRunner(deadline_s=30)
        report = runner.run(bookstore_catalog(), MongoStore(config))
    """

    def __init__(
        self,
        deadline_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if deadline_s is not None and deadline_s <= 0:
            raise ValueError("deadline_s must be > 0 or None")
        self.deadline_s = deadline_s
        self._clock = clock
        self.state = RunnerState.UNCONNECTED

    def run(self, catalog: Catalog | Iterable[OperationSpec], store: "StoreHandle") -> RunReport:
        """
        Run every catalog operation and return the report.

        A plain iterable of OperationSpec is accepted and run as an unnamed
        catalog.

        Raises:
            RuntimeError: If this runner has already been used
            StoreConnectionError: If the store connection cannot be acquired
        """
        if self.state != RunnerState.UNCONNECTED:
            raise RuntimeError(f"CatalogRunner is {self.state.value}; runners are single-use")

        if not isinstance(catalog, Catalog):
            catalog = Catalog(operations=catalog)
        # snapshot: the catalog is read-only for the duration of the run
        operations = tuple(catalog)
        report = RunReport(catalog_name=catalog.name, started_at=_now())

        try:
            store.connect()
        except StoreConnectionError:
            observe_run(RUN_CONNECTION_ERROR)
            raise
        except Exception as exc:
            observe_run(RUN_CONNECTION_ERROR)
            raise StoreConnectionError(str(exc)) from exc

        self.state = RunnerState.CONNECTED
        logger.info("Connected; running catalog %r (%d operations)", catalog.name, len(operations))
        start = self._clock()

        try:
            for index, spec in enumerate(operations):
                if self._deadline_exceeded(start):
                    self._expire(report, operations[index:])
                    break
                report.results.append(self._execute(store, spec))
        finally:
            self.state = RunnerState.CLOSED
            try:
                store.close()
            except Exception as exc:
                release = exc if isinstance(exc, ReleaseError) else ReleaseError(str(exc))
                logger.warning("Failed to release store connection: %s", release)
                report.warnings.append(f"connection release failed: {release}")

        report.finished_at = _now()
        observe_run(RUN_COMPLETED)
        logger.info(
            "Catalog %r finished: %d ok, %d failed",
            catalog.name,
            len(report.succeeded),
            len(report.failed),
        )
        return report

    def _deadline_exceeded(self, start: float) -> bool:
        if self.deadline_s is None:
            return False
        return self._clock() - start >= self.deadline_s

    def _expire(self, report: RunReport, remaining: tuple[OperationSpec, ...]) -> None:
        logger.warning(
            "Deadline of %ss exceeded; skipping %d remaining operation(s)",
            self.deadline_s,
            len(remaining),
        )
        message = f"deadline of {self.deadline_s}s exceeded before operation started"
        for spec in remaining:
            report.results.append(
                OperationResult.failure(spec.name, spec.kind, ErrorKind.TIMEOUT, message)
            )
            observe_operation(spec.kind.value, OperationStatus.FAILED.value, 0.0, executed=False)

    def _execute(self, store: "StoreHandle", spec: OperationSpec) -> OperationResult:
        op_start = self._clock()
        try:
            payload = _dispatch(store, spec)
            if (
                spec.kind == OperationKind.UPDATE_ONE
                and spec.require_match
                and not payload.get("matched")
            ):
                raise OperationError(
                    ErrorKind.NOT_FOUND, f"No document matched filter {spec.filter!r}"
                )
        except OperationError as exc:
            result = OperationResult.failure(
                spec.name, spec.kind, _error_kind(exc), exc.message, self._clock() - op_start
            )
        except Exception as exc:
            result = OperationResult.failure(
                spec.name,
                spec.kind,
                ErrorKind.GENERIC_DRIVER_ERROR,
                str(exc) or type(exc).__name__,
                self._clock() - op_start,
            )
        else:
            result = OperationResult.success(
                spec.name, spec.kind, payload, self._clock() - op_start
            )

        if not result.ok:
            logger.warning(
                "Operation %r (%s) failed [%s]: %s",
                spec.name,
                spec.kind.value,
                result.error_kind.value,
                result.message,
            )
        observe_operation(spec.kind.value, result.status.value, result.latency_s)
        return result


def _dispatch(store: "StoreHandle", spec: OperationSpec) -> Any:
    # the store gets copies so it cannot mutate the OperationSpec
    filter = copy.deepcopy(spec.filter) if spec.filter is not None else {}
    kind = spec.kind

    if kind == OperationKind.FIND:
        return store.find(
            filter,
            projection=copy.deepcopy(spec.projection),
            sort=copy.deepcopy(spec.sort),
            skip=spec.skip,
            limit=spec.limit,
        )
    if kind == OperationKind.UPDATE_ONE:
        return store.update_one(filter, copy.deepcopy(spec.update))
    if kind == OperationKind.DELETE_ONE:
        return store.delete_one(filter)
    if kind == OperationKind.AGGREGATE:
        return store.aggregate(copy.deepcopy(spec.pipeline))
    if kind == OperationKind.CREATE_INDEX:
        return store.create_index(copy.deepcopy(spec.index_keys))
    if kind == OperationKind.EXPLAIN:
        return store.explain(
            filter,
            projection=copy.deepcopy(spec.projection),
            sort=copy.deepcopy(spec.sort),
            skip=spec.skip,
            limit=spec.limit,
            verbosity=spec.verbosity,
        )
    raise OperationError(ErrorKind.GENERIC_DRIVER_ERROR, f"Unsupported operation kind: {kind}")


def _error_kind(exc: OperationError) -> ErrorKind:
    # stores outside this package may tag errors with kinds we do not know
    try:
        return ErrorKind(exc.kind)
    except ValueError:
        logger.debug("Unknown error kind %r; reporting as generic driver error", exc.kind)
        return ErrorKind.GENERIC_DRIVER_ERROR


def _now() -> datetime:
    return datetime.now(timezone.utc)


def run(
    catalog: Catalog | Iterable[OperationSpec],
    store: "StoreHandle",
    *,
    deadline_s: float | None = None,
) -> RunReport:
    """Run catalog against store with a fresh CatalogRunner."""
    return CatalogRunner(deadline_s=deadline_s).run(catalog, store)
