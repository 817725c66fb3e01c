from __future__ import annotations

from prometheus_client import Counter, Histogram

OPERATION_TOTAL = Counter(
    "querycat_operation_total",
    "Catalog operations executed, by operation kind and outcome.",
    ["kind", "status"],
)

OPERATION_LATENCY_SECONDS = Histogram(
    "querycat_operation_latency_seconds",
    "Store call latency per catalog operation.",
    ["kind"],
)

RUN_TOTAL = Counter(
    "querycat_run_total",
    "Catalog runs, by outcome.",
    ["outcome"],
)
