"""Multi-year membership history import in long or wide layout.

History is treated as authoritative for chapter existence: names that do not
match a stored chapter create one, unlike the roster and activity imports.
"""

from __future__ import annotations

from flask import current_app

from portal_app.importer.adapters import read_workbook
from portal_app.importer.entities import ChapterResolver
from portal_app.importer.normalize import clean_string, parse_count, parse_quarter, parse_year, to_date
from portal_app.importer.shape import HistoryShape, detect_history_shape
from portal_app.importer.utils import UploadedFile
from portal_app.models import ChapterType, YearlyHistory, db

from .base import ImportSummary, UpsertPlan, cell_at, commit_import, import_pipeline, is_blank_row, require_rows

KIND = "history"
LONG_NOTES = "history import"
WIDE_NOTES = "history import (wide)"


def _default_chapter_type(chapter_type) -> ChapterType:
    configured = ChapterType.from_label(
        current_app.config.get("HISTORY_DEFAULT_CHAPTER_TYPE"), default=ChapterType.ALUMNI
    )
    return ChapterType.from_label(chapter_type, default=configured)


def _plan_wide(plan: UpsertPlan, shape: HistoryShape, row, chapter_id: str) -> None:
    for column, year in shape.year_columns:
        plan.upsert(
            (chapter_id, year, 0),
            {
                "chapter_id": chapter_id,
                "year": year,
                "quarter": 0,
                "active_members": parse_count(cell_at(row, column)),
                "notes": WIDE_NOTES,
            },
        )


@import_pipeline(KIND)
def import_history(
    upload: UploadedFile,
    *,
    dry_run: bool = False,
    chapter_type: str | ChapterType | None = None,
) -> ImportSummary:
    """
    Upsert period snapshots from the first sheet of ``upload``.

    WIDE sheets write one snapshot per (row, year column); LONG sheets one per
    row, optionally scoped to a quarter via ``Quarter``/``Quarter Start``
    columns. LONG rows without a readable year are skipped. New chapters get
    ``chapter_type``, defaulting to ``HISTORY_DEFAULT_CHAPTER_TYPE``.
    """
    grid = read_workbook(upload.filename, upload.data).first_sheet()
    require_rows(grid, "History sheet")
    shape = detect_history_shape(grid[0])
    new_chapter_type = _default_chapter_type(chapter_type)

    summary = ImportSummary(kind=KIND, dry_run=dry_run, shape=shape.kind)
    resolver = ChapterResolver.load()
    existing = {
        (record.chapter_id, record.year, record.quarter): record
        for record in db.session.scalars(db.select(YearlyHistory))
    }
    plan = UpsertPlan(summary, existing, YearlyHistory, keep_existing=("quarter_start_date",))

    for row in grid[1:]:
        if is_blank_row(row):
            continue
        name = clean_string(cell_at(row, shape.chapter_column))
        if name is None:
            summary.skip()
            continue

        if shape.kind == "long":
            year = parse_year(cell_at(row, shape.year_column))
            if year is None:
                summary.skip()
                continue

        chapter_id, created = resolver.resolve_or_create(name, new_chapter_type)
        if created:
            summary.created_entities.append(" ".join(name.split()))

        if shape.kind == "wide":
            _plan_wide(plan, shape, row, chapter_id)
            continue

        quarter = parse_quarter(cell_at(row, shape.quarter_column)) or 0
        plan.upsert(
            (chapter_id, year, quarter),
            {
                "chapter_id": chapter_id,
                "year": year,
                "quarter": quarter,
                "quarter_start_date": to_date(cell_at(row, shape.quarter_start_column)),
                "active_members": parse_count(cell_at(row, shape.active_column)),
                "notes": LONG_NOTES,
            },
        )

    def write() -> None:
        if resolver.persist_pending():
            db.session.flush()
        plan.apply()

    if not dry_run:
        commit_import(summary, write)
    return summary
