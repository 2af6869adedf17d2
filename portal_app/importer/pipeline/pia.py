"""Program impact activity (PIA) log import with replace-all semantics.

The uploaded sheet is the single current truth for activity entries: a live
import deletes every stored entry and inserts the new set in the same
transaction.
"""

from __future__ import annotations

from portal_app.importer.adapters import read_workbook, records_from_grid
from portal_app.importer.contracts import PIA_COLUMNS, ColumnMap, bind_columns
from portal_app.importer.entities import ChapterResolver
from portal_app.importer.headers import HEADER_SCAN_ROWS, find_header_row
from portal_app.importer.normalize import (
    clean_string,
    normalize_boolean,
    normalize_money,
    parse_number,
    to_date,
)
from portal_app.importer.utils import UploadedFile
from portal_app.models import PiaEntry, db

from .base import ImportSummary, commit_import, import_pipeline, is_blank_row, require_rows

KIND = "pia"

# Field names accepted for the uploaded file, in preference order.
FILE_FIELD_CANDIDATES: tuple[str, ...] = ("piaFile", "pia_file", "file", "upload", "pia")

_PROGRAM_TEXT_FLAGS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("is_bbb", ("bbb",)),
    ("is_education", ("education",)),
    ("is_social", ("social",)),
    ("is_sbc", ("sbc", "sigma beta")),
)
_FLAG_COLUMNS = {"is_bbb": "bbb", "is_education": "education", "is_social": "social", "is_sbc": "sbc"}


def _program_flags(columns: ColumnMap, row) -> dict[str, bool]:
    program_text = (clean_string(columns.get(row, "program")) or "").lower()
    flags = {
        flag: any(token in program_text for token in tokens) for flag, tokens in _PROGRAM_TEXT_FLAGS
    }
    # An explicit category column overrides the program type text.
    for flag, field_name in _FLAG_COLUMNS.items():
        if columns.has(field_name):
            flags[flag] = normalize_boolean(columns.get(row, field_name))
    return flags


def _brothers(value) -> int | None:
    number = parse_number(value, default=None)
    return int(number) if number is not None else None


def build_entry_values(columns: ColumnMap, row, chapter_id: str) -> dict:
    activity_date = to_date(columns.get(row, "date"))
    return {
        "chapter_id": chapter_id,
        "activity_date": activity_date,
        "report_year": activity_date.year if activity_date else None,
        "hours": parse_number(columns.get(row, "hours"), default=0.0),
        "description": clean_string(columns.get(row, "description")),
        "brothers_attending": _brothers(columns.get(row, "brothers")),
        "black_spend_amount": normalize_money(columns.get(row, "black_spend")),
        "scholarship_funds_disbursed": normalize_money(columns.get(row, "scholarship")),
        **_program_flags(columns, row),
    }


@import_pipeline(KIND)
def import_pia(upload: UploadedFile, *, dry_run: bool = False) -> ImportSummary:
    """
    Replace all activity entries with the rows of ``upload``.

    The header row is the first of the top six rows containing a ``Chapter``
    cell. Rows naming unknown chapters are skipped and reported.
    """
    grid = read_workbook(upload.filename, upload.data).first_sheet()
    require_rows(grid, "PIA sheet")
    header_row = find_header_row(grid, max_rows=HEADER_SCAN_ROWS)
    headers, rows = records_from_grid(grid, header_row)
    columns = bind_columns(PIA_COLUMNS, dict.fromkeys(headers))

    summary = ImportSummary(kind=KIND, dry_run=dry_run)
    summary.deleted = db.session.execute(db.select(db.func.count(PiaEntry.id))).scalar_one()
    resolver = ChapterResolver.load()
    entries: list[dict] = []

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
        entries.append(build_entry_values(columns, row, chapter_id))
        summary.inserted += 1

    def write() -> None:
        db.session.execute(db.delete(PiaEntry))
        db.session.add_all(PiaEntry(**values) for values in entries)

    if not dry_run:
        commit_import(summary, write)
    return summary
