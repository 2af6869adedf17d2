"""Detect whether a history upload is laid out long or wide."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Sequence

from .errors import ImportFormatError
from .headers import normalize_label

HISTORY_FORMAT_MESSAGE = (
    "Provide LONG (Chapter|Year|Active Members) or WIDE (Chapter|2021|2022|...) format."
)

_YEAR_HEADER = re.compile(r"^\d{4}$")


@dataclass(frozen=True)
class HistoryShape:
    """Resolved layout of a history header row."""

    kind: Literal["long", "wide"]
    chapter_column: int
    year_column: int | None = None
    active_column: int | None = None
    quarter_column: int | None = None
    quarter_start_column: int | None = None
    year_columns: tuple[tuple[int, int], ...] = field(default_factory=tuple)


def _first(labels: Sequence[str], predicate) -> int | None:
    for position, label in enumerate(labels):
        if label and predicate(label):
            return position
    return None


def detect_history_shape(header_row: Sequence) -> HistoryShape:
    """
    Classify ``header_row``.

    WIDE is a ``chapter`` column plus at least one header that is a bare
    four-digit year. LONG is ``chapter``, ``year`` and a header containing
    ``active``. WIDE wins when both match.
    """
    labels = [normalize_label(cell) for cell in header_row]
    chapter_column = _first(labels, lambda label: label == "chapter")
    if chapter_column is None:
        raise ImportFormatError(HISTORY_FORMAT_MESSAGE)

    year_columns = tuple(
        (position, int(label)) for position, label in enumerate(labels) if _YEAR_HEADER.match(label)
    )
    if year_columns:
        return HistoryShape(kind="wide", chapter_column=chapter_column, year_columns=year_columns)

    year_column = _first(labels, lambda label: label == "year")
    active_column = _first(labels, lambda label: "active" in label)
    if year_column is not None and active_column is not None:
        return HistoryShape(
            kind="long",
            chapter_column=chapter_column,
            year_column=year_column,
            active_column=active_column,
            quarter_column=_first(labels, lambda label: label == "quarter"),
            quarter_start_column=_first(labels, lambda label: label.startswith("quarter start")),
        )

    raise ImportFormatError(HISTORY_FORMAT_MESSAGE)
