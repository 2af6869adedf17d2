"""Workbook adapter turning uploaded bytes into grids of raw cell values.

OOXML workbooks are read with openpyxl, legacy ``.xls`` files with xlrd and
flat files with the ``csv`` module. Every format is exposed the same way: a
``Workbook`` of named sheets, each a list of equally wide rows where empty
cells are ``None``.
"""

from __future__ import annotations

import csv
import io
import zipfile
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Sequence

import xlrd
from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from portal_app.importer.errors import WorkbookReadError

XLSX_EXTENSIONS: tuple[str, ...] = ("xlsx", "xlsm")
XLS_EXTENSIONS: tuple[str, ...] = ("xls",)
CSV_EXTENSIONS: tuple[str, ...] = ("csv",)
WORKBOOK_EXTENSIONS: tuple[str, ...] = XLSX_EXTENSIONS + XLS_EXTENSIONS + CSV_EXTENSIONS

_ZIP_MAGIC = b"PK\x03\x04"
_OLE_MAGIC = b"\xd0\xcf\x11\xe0"

Grid = list[list[object]]


@dataclass
class Workbook:
    """Named sheets in workbook order."""

    sheets: dict[str, Grid] = field(default_factory=dict)

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)

    def first_sheet(self) -> Grid:
        if not self.sheets:
            raise WorkbookReadError("Workbook contains no sheets.")
        return next(iter(self.sheets.values()))

    def sheet(self, name: str) -> Grid | None:
        return self.sheets.get(name)


def _blank_to_none(value):
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _rectangular(rows) -> Grid:
    grid = [[_blank_to_none(value) for value in row] for row in rows]
    # Drop trailing empty rows that spreadsheet tools leave behind.
    while grid and all(value is None for value in grid[-1]):
        grid.pop()
    width = max((len(row) for row in grid), default=0)
    return [row + [None] * (width - len(row)) for row in grid]


def decode_csv_bytes(data: bytes) -> str:
    """Decode as UTF-8; re-decode as Latin-1 when replacement characters appear."""
    text = data.decode("utf-8-sig", errors="replace")
    if "\ufffd" in text:
        text = data.decode("latin-1")
    return text


def _detect_format(filename: str, data: bytes) -> str:
    if data.startswith(_ZIP_MAGIC):
        return "xlsx"
    if data.startswith(_OLE_MAGIC):
        return "xls"
    extension = PurePath(filename or "").suffix.lower().lstrip(".")
    if extension in XLSX_EXTENSIONS or extension in XLS_EXTENSIONS:
        # Extension claims a binary workbook but the bytes disagree.
        raise WorkbookReadError(f"Could not read workbook '{filename}'.")
    return "csv"


def _read_xlsx(data: bytes) -> Workbook:
    try:
        book = load_workbook(io.BytesIO(data), data_only=True, read_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, ValueError) as exc:
        raise WorkbookReadError(f"Could not read workbook: {exc}") from exc
    try:
        return Workbook({ws.title: _rectangular(ws.iter_rows(values_only=True)) for ws in book.worksheets})
    finally:
        book.close()


def _read_xls(data: bytes) -> Workbook:
    try:
        book = xlrd.open_workbook(file_contents=data)
    except xlrd.XLRDError as exc:
        raise WorkbookReadError(f"Could not read workbook: {exc}") from exc
    sheets: dict[str, Grid] = {}
    for sheet in book.sheets():
        sheets[sheet.name] = _rectangular(sheet.row_values(index) for index in range(sheet.nrows))
    return Workbook(sheets)


def _read_csv(filename: str, data: bytes) -> Workbook:
    text = decode_csv_bytes(data)
    try:
        rows = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as exc:
        raise WorkbookReadError(f"Could not parse CSV: {exc}") from exc
    sheet_name = PurePath(filename or "upload.csv").stem or "Sheet1"
    return Workbook({sheet_name: _rectangular(rows)})


def read_workbook(filename: str, data: bytes) -> Workbook:
    """Parse ``data`` into a :class:`Workbook`, choosing the reader by content then extension."""
    if not data:
        raise WorkbookReadError("Uploaded file is empty.")
    fmt = _detect_format(filename, data)
    if fmt == "xlsx":
        return _read_xlsx(data)
    if fmt == "xls":
        return _read_xls(data)
    return _read_csv(filename, data)


def _unique_headers(header_row: Sequence) -> list[str]:
    headers: list[str] = []
    seen: dict[str, int] = {}
    for cell in header_row:
        base = str(cell).strip() if cell is not None and str(cell).strip() else "__EMPTY"
        if isinstance(cell, float) and cell.is_integer():
            base = str(int(cell))
        count = seen.get(base, 0)
        seen[base] = count + 1
        headers.append(base if count == 0 else f"{base}_{count}")
    return headers


def records_from_grid(grid: Grid, header_row: int = 0) -> tuple[list[str], list[dict[str, object]]]:
    """
    Convert a grid into ``(headers, rows)`` keyed by the labels on ``header_row``.

    Duplicate labels are suffixed ``_1``, ``_2`` and blank labels become
    ``__EMPTY`` so every column keeps a distinct key.
    """
    if header_row >= len(grid):
        return [], []
    headers = _unique_headers(grid[header_row])
    rows = [dict(zip(headers, row)) for row in grid[header_row + 1 :]]
    return headers, rows
