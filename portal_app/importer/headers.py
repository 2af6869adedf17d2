"""Header resolution for loosely structured spreadsheets.

Labels are compared after ``normalize_label``; a candidate matches a header
when the normalized header equals it or contains it as a substring.
"""

from __future__ import annotations

import re
from typing import Hashable, Iterable, Mapping, Sequence

from .normalize import clean_string

HEADER_SCAN_ROWS = 6
HEADER_ANCHOR = "chapter"

_SEPARATORS = re.compile(r"[\s\-_]+")


def normalize_label(label) -> str:
    """Lower-case ``label`` and collapse runs of space, hyphen and underscore."""
    text = clean_string(label)
    if text is None:
        return ""
    text = text.lstrip("\ufeff")
    return _SEPARATORS.sub(" ", text.lower()).strip()


def _header_pairs(headers) -> list[tuple[Hashable, str]]:
    # Positional rows resolve to an index, keyed rows to the original key.
    if isinstance(headers, Mapping):
        return [(key, normalize_label(key)) for key in headers.keys()]
    return [(position, normalize_label(label)) for position, label in enumerate(headers)]


def resolve_column(
    candidates: Sequence[str],
    headers: Sequence | Mapping,
    *,
    exclude: Iterable[Hashable] = (),
    exact: bool = False,
):
    """
    Locate the column matching the first satisfiable candidate label.

    ``headers`` is either a header row, in which case the result is a column
    index, or a keyed row, in which case the result is the key itself.
    Candidates are tried in priority order; for each, an exact match beats a
    substring match unless ``exact`` is set. Returns ``None`` when nothing
    matches.
    """
    pairs = _header_pairs(headers)

    excluded = set(exclude)
    available = [(ref, label) for ref, label in pairs if label and ref not in excluded]

    for candidate in candidates:
        wanted = normalize_label(candidate)
        if not wanted:
            continue
        for ref, label in available:
            if label == wanted:
                return ref
        if exact:
            continue
        for ref, label in available:
            if wanted in label:
                return ref
    return None


def resolve_key(candidates: Sequence[str], keys: Iterable[str], *, exclude: Iterable[str] = ()) -> str | None:
    """Keyed-row variant of :func:`resolve_column` returning the matching key."""
    return resolve_column(candidates, dict.fromkeys(keys), exclude=exclude)


def find_header_row(grid: Sequence[Sequence], anchor: str = HEADER_ANCHOR, max_rows: int = HEADER_SCAN_ROWS) -> int:
    """Index of the first of ``max_rows`` rows holding a cell labelled ``anchor``; ``0`` otherwise."""
    wanted = normalize_label(anchor)
    for index, row in enumerate(grid[:max_rows]):
        if any(normalize_label(cell) == wanted for cell in row or ()):
            return index
    return 0


def find_column_containing(grid: Sequence[Sequence], needle: str, *, max_rows: int) -> int | None:
    """First column (scanning row by row) whose cell text contains ``needle``."""
    wanted = normalize_label(needle)
    for row in grid[:max_rows]:
        for position, cell in enumerate(row or ()):
            if wanted in normalize_label(cell):
                return position
    return None
