from __future__ import annotations

import json
import pprint

from bson import json_util

from .runner.models import RunReport


def render_text(report: RunReport) -> str:
    """Human-readable report: one section per operation, then a summary."""
    lines: list[str] = []
    for result in report:
        lines.append("")
        lines.append(f"{result.name} ({result.kind.value}):")
        if result.ok:
            lines.append(pprint.pformat(result.payload, sort_dicts=False))
        else:
            lines.append(f"  FAILED [{result.error_kind.value}] {result.message}")
    for warning in report.warnings:
        lines.append("")
        lines.append(f"WARNING: {warning}")
    lines.append("")
    lines.append(
        f"{report.catalog_name}: {len(report)} operations, "
        f"{len(report.succeeded)} ok, {len(report.failed)} failed"
    )
    return "\n".join(lines)


def render_json(report: RunReport, indent: int = 2) -> str:
    # json_util handles ObjectId and datetime values in payloads
    return json.dumps(report.to_dict(), indent=indent, default=json_util.default)
