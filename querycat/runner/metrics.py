from __future__ import annotations

from ..metrics.registry import OPERATION_LATENCY_SECONDS, OPERATION_TOTAL, RUN_TOTAL

RUN_COMPLETED = "completed"
RUN_CONNECTION_ERROR = "connection_error"


def observe_operation(kind: str, status: str, latency_s: float, executed: bool = True) -> None:
    """
    Record one catalog operation outcome.

    Latency is only recorded for operations that reached the store; entries
    skipped after the deadline are counted but not timed.
    """
    OPERATION_TOTAL.labels(kind=kind, status=status).inc()
    if executed:
        OPERATION_LATENCY_SECONDS.labels(kind=kind).observe(latency_s)


def observe_run(outcome: str) -> None:
    RUN_TOTAL.labels(outcome=outcome).inc()
