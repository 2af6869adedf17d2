"""Shared pieces of the import pipelines.

A pipeline run has two phases. Planning walks every row, resolves chapters,
normalizes cells and records upserts in an ``UpsertPlan``; it reads storage
but never writes, and it is identical in dry-run and live mode. Applying the
plan happens only in live mode, inside ``commit_import``, which also appends
the audit record so the data and its audit entry land in one transaction.
"""

from __future__ import annotations

import functools
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Iterable, Mapping, Sequence

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from portal_app.importer.audit import YEARLY_KINDS, record_upload, touch_last_yearly_upload
from portal_app.importer.errors import ImportStorageError, UploadError
from portal_app.importer.metrics import record_import_rows, record_import_run
from portal_app.models import db


def is_blank_row(values: Iterable[Any]) -> bool:
    """True when every cell is empty after trimming."""
    for value in values:
        if value is None:
            continue
        if isinstance(value, str) and value.strip() == "":
            continue
        return False
    return True


@dataclass
class ImportSummary:
    """Counts and diagnostics returned by every pipeline."""

    kind: str
    dry_run: bool = False
    inserted: int = 0
    updated: int = 0
    skipped: int = 0
    unknown_entities: set[str] = field(default_factory=set)
    created_entities: list[str] = field(default_factory=list)
    shape: str | None = None
    year: int | None = None
    deleted: int | None = None
    total: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def imported(self) -> int:
        return self.inserted + self.updated

    def skip(self, unknown_name: str | None = None) -> None:
        self.skipped += 1
        if unknown_name:
            self.unknown_entities.add(" ".join(str(unknown_name).split()))

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "ok": True,
            "kind": self.kind,
            "imported": self.imported,
            "inserted": self.inserted,
            "updated": self.updated,
            "skipped": self.skipped,
            "unknown_entities": sorted(self.unknown_entities, key=str.lower),
            "dryRun": self.dry_run,
        }
        if self.shape is not None:
            payload["shape"] = self.shape
        if self.year is not None:
            payload["year"] = self.year
        if self.created_entities:
            payload["created_entities"] = list(self.created_entities)
        if self.deleted is not None:
            payload["deleted"] = self.deleted
        if self.total is not None:
            payload["total"] = self.total
        payload.update(self.extra)
        return payload


class UpsertPlan:
    """
    Ordered upserts keyed on a table's natural key.

    ``existing`` maps keys to the rows already stored. Repeated keys within
    one upload merge into a single write; the first occurrence counts as an
    insert or update depending on storage, later ones as updates. Columns in
    ``keep_existing`` are only overwritten by non-null values.
    """

    def __init__(
        self,
        summary: ImportSummary,
        existing: Mapping[Hashable, Any],
        factory: Callable[..., Any],
        *,
        keep_existing: Iterable[str] = (),
        insert_only: Iterable[str] = (),
    ) -> None:
        self.summary = summary
        self.existing = existing
        self.factory = factory
        self.keep_existing = frozenset(keep_existing)
        self.insert_only = frozenset(insert_only)
        self._planned: dict[Hashable, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._planned)

    def upsert(self, key: Hashable, values: Mapping[str, Any]) -> bool:
        """Plan a write; returns True when it creates a new row."""
        previous = self._planned.get(key)
        if previous is None:
            created = key not in self.existing
            self._planned[key] = dict(values)
        else:
            created = False
            for column, value in values.items():
                if value is None and column in self.keep_existing:
                    continue
                previous[column] = value
        if created:
            self.summary.inserted += 1
        else:
            self.summary.updated += 1
        return created

    def apply(self) -> None:
        for key, values in self._planned.items():
            record = self.existing.get(key)
            if record is None:
                db.session.add(self.factory(**values))
                continue
            for column, value in values.items():
                if column in self.insert_only:
                    continue
                if value is None and column in self.keep_existing:
                    continue
                setattr(record, column, value)


def _storage_message(exc: SQLAlchemyError) -> str:
    original = getattr(exc, "orig", None)
    return str(original) if original is not None else str(exc)


def commit_import(summary: ImportSummary, write: Callable[[], None]) -> None:
    """
    Run ``write`` and the audit bookkeeping in one transaction.

    Never called for dry runs. Any storage failure rolls the whole
    transaction back and surfaces as ``ImportStorageError``.
    """
    try:
        write()
        record_upload(summary.kind)
        if summary.kind in YEARLY_KINDS:
            touch_last_yearly_upload()
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(
            "Import transaction failed for %s",
            summary.kind,
            extra={"import_kind": summary.kind},
        )
        raise ImportStorageError(_storage_message(exc), kind=summary.kind) from exc


def import_pipeline(kind: str):
    """Log, time and count one pipeline function returning an ``ImportSummary``."""

    def decorator(func: Callable[..., ImportSummary]) -> Callable[..., ImportSummary]:
        @functools.wraps(func)
        def wrapper(*args, dry_run: bool = False, **kwargs) -> ImportSummary:
            logger = current_app.logger
            started = time.perf_counter()
            logger.info("Import %s started", kind, extra={"import_kind": kind, "dry_run": dry_run})
            try:
                summary = func(*args, dry_run=dry_run, **kwargs)
            except UploadError as exc:
                record_import_run(kind, outcome="rejected", dry_run=dry_run)
                logger.info("Import %s rejected: %s", kind, exc, extra={"import_kind": kind})
                raise
            except ImportStorageError:
                record_import_run(kind, outcome="failure", dry_run=dry_run)
                raise
            elapsed = time.perf_counter() - started
            record_import_run(kind, outcome="success", dry_run=dry_run, duration_seconds=elapsed)
            if not dry_run:
                record_import_rows(
                    kind, inserted=summary.inserted, updated=summary.updated, skipped=summary.skipped
                )
            if summary.unknown_entities:
                logger.warning(
                    "Import %s skipped rows for unknown chapters: %s",
                    kind,
                    ", ".join(sorted(summary.unknown_entities)),
                    extra={"import_kind": kind, "unknown_entities": sorted(summary.unknown_entities)},
                )
            logger.info(
                "Import %s finished: %d imported, %d skipped",
                kind,
                summary.imported,
                summary.skipped,
                extra={
                    "import_kind": kind,
                    "dry_run": dry_run,
                    "inserted": summary.inserted,
                    "updated": summary.updated,
                    "skipped": summary.skipped,
                    "duration_seconds": round(elapsed, 3),
                },
            )
            return summary

        wrapper.kind = kind  # type: ignore[attr-defined]
        return wrapper

    return decorator


def require_rows(grid: Sequence[Sequence[Any]], what: str) -> None:
    if not grid:
        raise UploadError(f"{what} is empty.")


def cell_at(row: Sequence[Any], column: int | None):
    """Value at ``column`` or ``None`` when the column is unresolved or the row is short."""
    if column is None or column >= len(row):
        return None
    return row[column]
