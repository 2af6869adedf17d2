"""Chapter roster import keyed on (chapter, member number)."""

from __future__ import annotations

from datetime import date

from portal_app.importer.adapters import read_workbook, records_from_grid
from portal_app.importer.contracts import ROSTER_COLUMNS, bind_columns
from portal_app.importer.entities import ChapterResolver
from portal_app.importer.headers import HEADER_SCAN_ROWS, find_header_row
from portal_app.importer.normalize import clean_string, extract_latest_year, to_date
from portal_app.importer.utils import UploadedFile
from portal_app.models import Member, db

from .base import (
    ImportSummary,
    UpsertPlan,
    commit_import,
    import_pipeline,
    is_blank_row,
    require_rows,
)

KIND = "roster"


def default_status(financial_through_year: int | None, *, today: date | None = None) -> str:
    """``Active`` when dues are paid through the current year, else ``Not Financial``."""
    current_year = (today or date.today()).year
    if financial_through_year and financial_through_year >= current_year:
        return "Active"
    return "Not Financial"


@import_pipeline(KIND)
def import_roster(upload: UploadedFile, *, dry_run: bool = False) -> ImportSummary:
    """
    Upsert roster members from the first sheet of ``upload``.

    Rows naming unknown chapters are skipped and reported. Rows without a
    member number are skipped since the roster key would be incomplete. A
    blank status is derived from the latest year in ``Years Paid``.
    """
    grid = read_workbook(upload.filename, upload.data).first_sheet()
    require_rows(grid, "Roster sheet")
    header_row = find_header_row(grid, max_rows=HEADER_SCAN_ROWS)
    headers, rows = records_from_grid(grid, header_row)
    columns = bind_columns(ROSTER_COLUMNS, dict.fromkeys(headers))

    summary = ImportSummary(kind=KIND, dry_run=dry_run)
    resolver = ChapterResolver.load()
    existing = {
        (member.chapter_id, member.member_number): member for member in db.session.scalars(db.select(Member))
    }
    plan = UpsertPlan(summary, existing, Member)

    for row in rows:
        if is_blank_row(row.values()):
            continue
        name = clean_string(columns.get(row, "chapter"))
        if name is None:
            summary.skip()
            continue
        chapter_id = resolver.lookup(name)
        if chapter_id is None:
            summary.skip(name)
            continue
        member_number = clean_string(columns.get(row, "member_number"))
        if member_number is None:
            summary.skip()
            continue

        financial_through_year = extract_latest_year(columns.get(row, "years_paid"))
        status = clean_string(columns.get(row, "status")) or default_status(financial_through_year)
        plan.upsert(
            (chapter_id, member_number),
            {
                "chapter_id": chapter_id,
                "member_number": member_number,
                "first_name": clean_string(columns.get(row, "first_name")),
                "last_name": clean_string(columns.get(row, "last_name")),
                "initiated_date": to_date(columns.get(row, "initiated_date")),
                "financial_through_year": financial_through_year,
                "status": status,
            },
        )

    if not dry_run:
        commit_import(summary, plan.apply)
    return summary
