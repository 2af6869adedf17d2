"""Prometheus metrics helpers for the importer."""

from __future__ import annotations

from typing import Literal

from prometheus_client import Counter, Histogram

_import_runs = Counter(
    "portal_import_runs_total",
    "Import pipeline executions by kind and outcome.",
    ["kind", "outcome", "dry_run"],
)
_import_rows = Counter(
    "portal_import_rows_total",
    "Rows processed by import pipelines, by result.",
    ["kind", "result"],
)
_import_duration = Histogram(
    "portal_import_duration_seconds",
    "Wall-clock duration of import pipeline executions.",
    ["kind"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60),
)


def record_import_run(
    kind: str,
    *,
    outcome: Literal["success", "rejected", "failure"],
    dry_run: bool,
    duration_seconds: float | None = None,
) -> None:
    """Count one pipeline execution and observe its duration."""

    _import_runs.labels(kind=kind, outcome=outcome, dry_run="true" if dry_run else "false").inc()
    if duration_seconds is not None:
        _import_duration.labels(kind=kind).observe(max(duration_seconds, 0.0))


def record_import_rows(kind: str, *, inserted: int = 0, updated: int = 0, skipped: int = 0) -> None:
    """Increment per-result row counters."""

    for result, count in (("inserted", inserted), ("updated", updated), ("skipped", skipped)):
        if count:
            _import_rows.labels(kind=kind, result=result).inc(count)
