from datetime import date, datetime, time, timedelta

import pytest

from portal_app.importer.normalize import (
    clean_string,
    extract_latest_year,
    normalize_boolean,
    normalize_date,
    normalize_money,
    parse_count,
    parse_number,
    parse_quarter,
    parse_year,
    split_full_name,
    to_date,
    to_int,
    year_from_filename,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (45292, "2024-01-01"),
        ("45292", "2024-01-01"),
        (45292.75, "2024-01-01"),
        ("2024-03-05", "2024-03-05"),
        ("2024/3/5", "2024-03-05"),
        ("3/5/24", "2024-03-05"),
        ("03/05/2024", "2024-03-05"),
        ("March 5, 2024", "2024-03-05"),
        (date(2023, 1, 2), "2023-01-02"),
        (datetime(2023, 1, 2, 15, 30), "2023-01-02"),
    ],
)
def test_normalize_date_strategies(value, expected):
    assert normalize_date(value) == expected


def test_normalize_date_returns_fallback_for_blank_and_garbage():
    assert normalize_date(None) is None
    assert normalize_date("   ") is None
    assert normalize_date("not a date", fallback="unknown") == "unknown"
    assert normalize_date("2024-02-30") is None


def test_normalize_date_ignores_time_only_cells():
    assert normalize_date(time(9, 30), fallback="unknown") == "unknown"
    assert normalize_date(timedelta(hours=2)) is None
    assert to_date(time(17, 0)) is None


def test_normalize_date_output_reparses_to_itself():
    first = normalize_date("7/4/21")
    assert first == "2021-07-04"
    assert normalize_date(first) == first
    assert to_date(first) == date(2021, 7, 4)


def test_normalize_money():
    assert normalize_money("$1,234.50") == 1234.5
    assert normalize_money("0") == 0
    assert normalize_money("") is None
    assert normalize_money(None) is None
    assert normalize_money("n/a") is None
    assert normalize_money(12) == 12.0


@pytest.mark.parametrize("value", ["Yes", "y", "X", "true", "T", "1", "2", 1, 3.5, True])
def test_normalize_boolean_truthy(value):
    assert normalize_boolean(value) is True


@pytest.mark.parametrize("value", ["no", "", None, "0", 0, "maybe", False])
def test_normalize_boolean_falsy(value):
    assert normalize_boolean(value) is False


def test_extract_latest_year():
    assert extract_latest_year("23,24,25") == 2025
    assert extract_latest_year("2022, 2023") == 2023
    assert extract_latest_year(24.0) == 2024
    assert extract_latest_year("") is None
    assert extract_latest_year("n/a") is None


def test_integer_and_count_parsing():
    assert to_int("12a3") == 123
    assert to_int("abc") is None
    assert to_int(2010.0) == 2010
    assert parse_count("1,234") == 1234
    assert parse_count("12 members") == 12
    assert parse_count("") == 0
    assert parse_count("none") == 0
    assert parse_count(7.0) == 7
    assert parse_number("2.5") == 2.5
    assert parse_number("", default=None) is None


def test_clean_string():
    assert clean_string("  Alpha  ") == "Alpha"
    assert clean_string("   ") is None
    assert clean_string(1001.0) == "1001"


def test_split_full_name():
    assert split_full_name("John Q Public") == ("John Q", "Public")
    assert split_full_name("Cher") == ("Cher", "")
    assert split_full_name(None) == (None, None)


def test_year_quarter_and_filename_helpers():
    assert year_from_filename("EOY_2023_final.xlsx") == 2023
    assert year_from_filename("report.xlsx", default=2020) == 2020
    assert parse_year("FY 2023") == 2023
    assert parse_year(2023.0) == 2023
    assert parse_year("soon") is None
    assert parse_quarter("Q2") == 2
    assert parse_quarter(3.0) == 3
    assert parse_quarter("Q5") is None
