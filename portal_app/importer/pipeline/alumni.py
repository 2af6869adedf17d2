"""Alumni census CSV import keyed globally on member number."""

from __future__ import annotations

from portal_app.importer.adapters import read_workbook, records_from_grid
from portal_app.importer.contracts import ALUMNI_COLUMNS, ColumnMap, bind_columns
from portal_app.importer.entities import ChapterResolver
from portal_app.importer.normalize import clean_string, normalize_boolean, split_full_name, to_date, to_int
from portal_app.importer.utils import UploadedFile
from portal_app.models import AlumniMember, db

from .base import ImportSummary, UpsertPlan, commit_import, import_pipeline, is_blank_row, require_rows

KIND = "alumni_csv"

_TEXT_FIELDS: tuple[str, ...] = (
    "email",
    "affiliated_chapter_number",
    "affiliated_chapter_region",
    "affiliated_chapter_university",
    "initiated_chapter",
    "initiated_chapter_region",
    "initiated_chapter_university",
    "member_type",
    "life_member_type",
    "career_field_code",
    "career_field",
    "military_affiliation",
    "last_rank_achieved",
    "dsc_number",
    "al_locke_scholar_number",
)
_FLAG_FIELDS: tuple[str, ...] = (
    "currently_financial",
    "active_duty",
    "former_sbc",
    "dsc_member",
    "al_locke_scholar",
    "jt_floyd_hof_member",
)
_INT_FIELDS: tuple[str, ...] = ("initiated_year", "consecutive_dues", "financial_through")


def _flag(value) -> bool | None:
    # Blank stays unknown rather than false.
    if clean_string(value) is None:
        return None
    return normalize_boolean(value)


def build_alumni_values(columns: ColumnMap, row, member_number: str) -> dict:
    full_name = clean_string(columns.get(row, "full_name"))
    first_name, last_name = split_full_name(full_name)
    values = {
        "member_number": member_number,
        "full_name": full_name,
        "first_name": clean_string(first_name),
        "last_name": clean_string(last_name),
        "affiliated_chapter": clean_string(columns.get(row, "affiliated_chapter")),
        "initiated_date": to_date(columns.get(row, "initiated_date")),
    }
    values.update({name: clean_string(columns.get(row, name)) for name in _TEXT_FIELDS})
    values.update({name: _flag(columns.get(row, name)) for name in _FLAG_FIELDS})
    values.update({name: to_int(columns.get(row, name)) for name in _INT_FIELDS})
    return values


@import_pipeline(KIND)
def import_alumni(upload: UploadedFile, *, dry_run: bool = False) -> ImportSummary:
    """
    Upsert alumni census records from a CSV export.

    Rows without a member number are skipped. A non-blank affiliated chapter
    must match a stored chapter; otherwise the row is skipped and the name
    reported. Records absent from the file are left untouched.
    """
    grid = read_workbook(upload.filename, upload.data).first_sheet()
    require_rows(grid, "Alumni CSV")
    headers, rows = records_from_grid(grid, 0)
    columns = bind_columns(ALUMNI_COLUMNS, dict.fromkeys(headers))
    rows = [row for row in rows if not is_blank_row(row.values())]

    summary = ImportSummary(kind=KIND, dry_run=dry_run, total=len(rows))
    resolver = ChapterResolver.load()
    existing = {member.member_number: member for member in db.session.scalars(db.select(AlumniMember))}
    plan = UpsertPlan(summary, existing, AlumniMember)

    for row in rows:
        member_number = clean_string(columns.get(row, "member_number"))
        if member_number is None:
            summary.skip()
            continue
        values = build_alumni_values(columns, row, member_number)
        affiliated = values["affiliated_chapter"]
        chapter_id = None
        if affiliated is not None:
            chapter_id = resolver.lookup(affiliated)
            if chapter_id is None:
                summary.skip(affiliated)
                continue
        values["affiliated_chapter_id"] = chapter_id
        plan.upsert(member_number, values)

    summary.extra["errors"] = summary.skipped
    if not dry_run:
        commit_import(summary, plan.apply)
    return summary
