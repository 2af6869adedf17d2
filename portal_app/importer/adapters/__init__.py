"""Importer adapters turning uploaded bytes into tabular data."""

from __future__ import annotations

from .workbook import (
    CSV_EXTENSIONS,
    WORKBOOK_EXTENSIONS,
    Workbook,
    decode_csv_bytes,
    read_workbook,
    records_from_grid,
)

__all__ = [
    "CSV_EXTENSIONS",
    "WORKBOOK_EXTENSIONS",
    "Workbook",
    "decode_csv_bytes",
    "read_workbook",
    "records_from_grid",
]
