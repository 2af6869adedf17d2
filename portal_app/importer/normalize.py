"""Cell normalizers for spreadsheet and CSV uploads.

Every function here is pure and total: malformed input yields ``None`` (or the
caller-supplied fallback) instead of raising, so a single bad cell never
rejects the whole row.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta, timezone

from dateutil import parser as date_parser

# Day zero of the 1900 spreadsheet date system.
SPREADSHEET_EPOCH = datetime(1899, 12, 30, tzinfo=timezone.utc)
MILLISECONDS_PER_DAY = 86_400_000

TRUTHY_TOKENS = frozenset({"true", "1", "yes", "y", "x", "t"})

_NUMERIC_STRING = re.compile(r"^\d+(\.\d+)?$")
_ISO_DATE = re.compile(r"^(\d{4})[-/](\d{1,2})[-/](\d{1,2})$")
_US_DATE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{2}|\d{4})$")
_YEAR_TOKEN = re.compile(r"\d{1,4}")
_FILENAME_YEAR = re.compile(r"(20\d{2})")
_LEADING_INT = re.compile(r"^[-+]?\d+")
_FOUR_DIGIT_YEAR = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_QUARTER = re.compile(r"^q?\s*([1-4])$", re.IGNORECASE)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def clean_string(value) -> str | None:
    """Trim ``value``; empty results become ``None`` rather than ``""``."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _expand_two_digit_year(year: int) -> int:
    return 2000 + year if year < 100 else year


def _serial_to_iso(serial: float) -> str | None:
    if not math.isfinite(serial):
        return None
    try:
        moment = SPREADSHEET_EPOCH + timedelta(milliseconds=round(serial * MILLISECONDS_PER_DAY))
    except OverflowError:
        return None
    return moment.date().isoformat()


def _build_iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def normalize_date(value, fallback=None):
    """
    Convert a cell to a canonical ``YYYY-MM-DD`` string.

    Strategies, in order: native date values, spreadsheet serial numbers
    (exact millisecond arithmetic from 1899-12-30), ``YYYY-MM-DD`` or
    ``YYYY/MM/DD``, ``MM/DD/YY[YY]`` with two-digit years read as ``20YY``,
    then a general date parser. Returns ``fallback`` when none succeed.
    """
    if _is_blank(value):
        return fallback
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return fallback
    if isinstance(value, (time, timedelta)):
        return fallback

    if isinstance(value, (int, float)):
        return _serial_to_iso(float(value)) or fallback

    text = str(value).strip()
    if _NUMERIC_STRING.match(text):
        return _serial_to_iso(float(text)) or fallback

    match = _ISO_DATE.match(text)
    if match:
        parsed = _build_iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if parsed:
            return parsed

    match = _US_DATE.match(text)
    if match:
        year = _expand_two_digit_year(int(match.group(3)))
        parsed = _build_iso(year, int(match.group(1)), int(match.group(2)))
        if parsed:
            return parsed

    try:
        return date_parser.parse(text).date().isoformat()
    except (ValueError, OverflowError):
        return fallback


def to_date(value) -> date | None:
    """Normalize a cell straight to a ``datetime.date`` for model columns."""
    iso = normalize_date(value)
    return date.fromisoformat(iso) if iso else None


def normalize_money(value) -> float | None:
    """Parse currency text such as ``"$1,234.50"``; blank or garbage gives ``None``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    text = clean_string(value)
    if text is None:
        return None
    text = text.replace("$", "").replace(",", "").strip()
    if not text:
        return None
    try:
        amount = float(text)
    except ValueError:
        return None
    return amount if math.isfinite(amount) else None


def normalize_boolean(value) -> bool:
    """Truthy tokens are ``true, 1, yes, y, x, t``; numbers are truthy when positive."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    text = clean_string(value)
    if text is None:
        return False
    lowered = text.lower()
    if lowered in TRUTHY_TOKENS:
        return True
    try:
        return float(lowered) > 0
    except ValueError:
        return False


def extract_latest_year(text) -> int | None:
    """
    Return the latest year in a list such as ``"23,24,25"``.

    All 1-4 digit tokens are read; the maximum is expanded to ``20YY`` when it
    has fewer than three digits.
    """
    if _is_blank(text):
        return None
    if isinstance(text, float) and text.is_integer():
        text = int(text)
    tokens = [int(token) for token in _YEAR_TOKEN.findall(str(text))]
    if not tokens:
        return None
    return _expand_two_digit_year(max(tokens))


def to_int(value) -> int | None:
    """Keep only the digits of ``value``; ``None`` when there are none."""
    if _is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    digits = re.sub(r"\D", "", str(value))
    return int(digits) if digits else None


def parse_count(value) -> int:
    """Membership counts: thousands separators removed, leading integer kept, else ``0``."""
    if isinstance(value, bool) or _is_blank(value):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    match = _LEADING_INT.match(str(value).replace(",", "").strip())
    return int(match.group(0)) if match else 0


def parse_number(value, default: float | None = 0.0) -> float | None:
    """Decimal parsing for hours and head counts, ``default`` when unparseable."""
    if isinstance(value, bool) or _is_blank(value):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    try:
        number = float(str(value).replace(",", "").strip())
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def split_full_name(full_name) -> tuple[str | None, str | None]:
    """
    Split a display name into ``(first, last)``.

    The final whitespace-delimited token is the last name; a single token
    yields an empty last name.
    """
    text = clean_string(full_name)
    if text is None:
        return None, None
    parts = text.split()
    if len(parts) == 1:
        return parts[0], ""
    return " ".join(parts[:-1]), parts[-1]


def year_from_filename(filename: str | None, default: int | None = None) -> int | None:
    """First ``20YY`` token embedded in ``filename``."""
    match = _FILENAME_YEAR.search(filename or "")
    return int(match.group(1)) if match else default


def parse_year(value) -> int | None:
    """Four-digit year from a cell such as ``2023``, ``2023.0`` or ``"FY 2023"``."""
    if isinstance(value, bool) or _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    match = _FOUR_DIGIT_YEAR.search(str(value))
    return int(match.group(1)) if match else None


def parse_quarter(value) -> int | None:
    """Quarter number from ``Q1``..``Q4`` or ``1``..``4``."""
    text = clean_string(value)
    if text is None:
        return None
    match = _QUARTER.match(text)
    return int(match.group(1)) if match else None
