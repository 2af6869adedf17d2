"""Chapter list import: one row per chapter, upserted by name."""

from __future__ import annotations

from portal_app.importer.adapters import read_workbook
from portal_app.importer.entities import name_key
from portal_app.importer.errors import MissingColumnError
from portal_app.importer.headers import resolve_column
from portal_app.importer.normalize import clean_string, to_date
from portal_app.importer.utils import UploadedFile
from portal_app.models import Chapter, ChapterType, db

from .base import (
    ImportSummary,
    UpsertPlan,
    cell_at,
    commit_import,
    import_pipeline,
    is_blank_row,
    require_rows,
)

KIND = "chapters"


def _new_chapter(**values) -> Chapter:
    return Chapter(**{column: value for column, value in values.items() if value is not None})


@import_pipeline(KIND)
def import_chapters(upload: UploadedFile, *, dry_run: bool = False) -> ImportSummary:
    """
    Upsert chapters from the first sheet of ``upload``.

    ``Chapter`` is required; the type, location and charter columns are the
    first headers containing ``type``, ``location`` and ``charter``. A type
    starting with ``c`` means collegiate, whose location doubles as the
    university. An unparseable or missing charter date is stored as null.
    """
    grid = read_workbook(upload.filename, upload.data).first_sheet()
    require_rows(grid, "Chapters sheet")
    header = grid[0]

    chapter_column = resolve_column(("chapter",), header, exact=True)
    if chapter_column is None:
        raise MissingColumnError(["Chapter"])
    claimed = {chapter_column}
    type_column = resolve_column(("type",), header, exclude=claimed)
    location_column = resolve_column(("location",), header, exclude=claimed)
    charter_column = resolve_column(("charter",), header, exclude=claimed)

    summary = ImportSummary(kind=KIND, dry_run=dry_run)
    existing = {name_key(chapter.name): chapter for chapter in db.session.scalars(db.select(Chapter))}
    plan = UpsertPlan(
        summary,
        existing,
        _new_chapter,
        keep_existing=("type", "city", "charter_date"),
        insert_only=("name", "code", "status"),
    )

    for row in grid[1:]:
        if is_blank_row(row):
            continue
        name = clean_string(cell_at(row, chapter_column))
        if name is None:
            summary.skip()
            continue
        name = " ".join(name.split())

        chapter_type = None
        type_text = clean_string(cell_at(row, type_column))
        if type_column is not None:
            chapter_type = ChapterType.COLLEGIATE if (type_text or "").lower().startswith("c") else ChapterType.ALUMNI
        location = clean_string(cell_at(row, location_column))

        values = {
            "name": name,
            "code": name,
            "type": chapter_type,
            "city": location,
            "charter_date": to_date(cell_at(row, charter_column)),
            "status": "Active",
        }
        # Alumni chapters have no university; a blank collegiate location keeps the stored one.
        if chapter_type is ChapterType.ALUMNI:
            values["university"] = None
        elif chapter_type is ChapterType.COLLEGIATE and location is not None:
            values["university"] = location
        plan.upsert(name_key(name), values)

    summary.extra["chapters_upserted"] = summary.imported
    if not dry_run:
        commit_import(summary, plan.apply)
    return summary
