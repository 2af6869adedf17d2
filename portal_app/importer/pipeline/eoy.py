"""End-of-year membership import from the region's fixed-layout workbook sheet."""

from __future__ import annotations

from datetime import date
from typing import Sequence

from flask import current_app

from portal_app.importer.adapters import Workbook, read_workbook
from portal_app.importer.entities import ChapterResolver
from portal_app.importer.errors import ImportFormatError, MissingUploadError
from portal_app.importer.headers import find_column_containing
from portal_app.importer.normalize import clean_string, parse_count, year_from_filename
from portal_app.importer.utils import UploadedFile
from portal_app.models import YearlyHistory, db

from .base import ImportSummary, UpsertPlan, cell_at, commit_import, import_pipeline, is_blank_row

KIND = "yearly"
NOTES = "EOY import"
DEFAULT_REGION_SHEET = "Southeastern"

# Legacy layout: the membership column is labelled somewhere in the first 30
# rows, chapter names sit in column A and data starts at A24.
EOY_ACTIVE_SCAN_ROWS = 30
EOY_DATA_START_ROW = 23
EOY_NAME_COLUMN = 0


def _locate_region_sheet(uploads: Sequence[UploadedFile], sheet_name: str) -> tuple[UploadedFile, list]:
    for upload in uploads:
        workbook: Workbook = read_workbook(upload.filename, upload.data)
        grid = workbook.sheet(sheet_name)
        if grid is not None:
            return upload, grid
    raise ImportFormatError(f"No '{sheet_name}' sheet")


@import_pipeline(KIND)
def import_end_of_year(
    uploads: UploadedFile | Sequence[UploadedFile],
    *,
    dry_run: bool = False,
    region_sheet: str | None = None,
    year: int | None = None,
) -> ImportSummary:
    """
    Upsert one whole-year snapshot per chapter listed on the region sheet.

    The first upload containing the region sheet is used. The snapshot year
    comes from a ``20YY`` token in that file's name unless ``year`` is given,
    falling back to the current year. Chapters not already stored are skipped
    and reported; the block of data rows ends at the first blank row.
    """
    if isinstance(uploads, UploadedFile):
        uploads = [uploads]
    if not uploads:
        raise MissingUploadError("Upload eoyFile")
    sheet_name = region_sheet or current_app.config.get("REGION_SHEET_NAME") or DEFAULT_REGION_SHEET

    upload, grid = _locate_region_sheet(uploads, sheet_name)
    if not grid:
        raise ImportFormatError("EOY sheet empty")

    active_column = find_column_containing(grid, "active", max_rows=EOY_ACTIVE_SCAN_ROWS)
    if active_column is None:
        raise ImportFormatError("Could not locate 'Active' column in EOY sheet")

    snapshot_year = year or year_from_filename(upload.filename, default=date.today().year)
    summary = ImportSummary(kind=KIND, dry_run=dry_run, year=snapshot_year)
    resolver = ChapterResolver.load()
    existing = {
        (record.chapter_id, record.year, record.quarter): record
        for record in db.session.scalars(
            db.select(YearlyHistory).where(YearlyHistory.year == snapshot_year, YearlyHistory.quarter == 0)
        )
    }
    plan = UpsertPlan(summary, existing, YearlyHistory)

    for row in grid[EOY_DATA_START_ROW:]:
        if is_blank_row(row):
            break
        name = clean_string(cell_at(row, EOY_NAME_COLUMN))
        if name is None:
            summary.skip()
            continue
        chapter_id = resolver.lookup(name)
        if chapter_id is None:
            summary.skip(name)
            continue
        plan.upsert(
            (chapter_id, snapshot_year, 0),
            {
                "chapter_id": chapter_id,
                "year": snapshot_year,
                "quarter": 0,
                "active_members": parse_count(cell_at(row, active_column)),
                "notes": NOTES,
            },
        )

    summary.extra["rows"] = summary.imported
    if not dry_run:
        commit_import(summary, plan.apply)
    return summary
