import pytest

from portal_app.importer.adapters import decode_csv_bytes, read_workbook, records_from_grid
from portal_app.importer.errors import WorkbookReadError


def test_read_xlsx_keeps_sheet_order_and_pads_rows(make_xlsx):
    upload = make_xlsx(
        sheets={
            "Summary": [["Region", "Total"], ["SE", 12]],
            "Southeastern": [["Chapter"], ["Alpha Beta", 31, "extra"]],
        }
    )

    workbook = read_workbook(upload.filename, upload.data)

    assert workbook.sheet_names == ["Summary", "Southeastern"]
    assert workbook.first_sheet() == [["Region", "Total"], ["SE", 12]]
    assert workbook.sheet("Southeastern") == [["Chapter", None, None], ["Alpha Beta", 31, "extra"]]
    assert workbook.sheet("Missing") is None


def test_read_csv_turns_blank_cells_into_none(make_csv):
    upload = make_csv([["Chapter", "City", "Notes"], ["Alpha Beta", "", "  "], ["", "", ""]])

    grid = read_workbook(upload.filename, upload.data).first_sheet()

    assert grid == [["Chapter", "City", "Notes"], ["Alpha Beta", None, None]]


def test_read_csv_falls_back_to_latin1(make_csv):
    upload = make_csv([["Full Name"], ["José Núñez"]], encoding="latin-1")

    grid = read_workbook(upload.filename, upload.data).first_sheet()

    assert grid[1] == ["José Núñez"]


def test_decode_csv_bytes_strips_utf8_bom():
    assert decode_csv_bytes(b"\xef\xbb\xbfChapter,Year\n") == "Chapter,Year\n"


def test_workbook_extension_with_non_workbook_bytes_is_rejected():
    with pytest.raises(WorkbookReadError):
        read_workbook("history.xlsx", b"Chapter,2021\nAlpha,3\n")


def test_empty_upload_is_rejected():
    with pytest.raises(WorkbookReadError):
        read_workbook("history.csv", b"")


def test_csv_named_upload_with_xlsx_bytes_is_read_as_workbook(make_xlsx):
    upload = make_xlsx([["Chapter", "2021"], ["Alpha Beta", 5]])

    grid = read_workbook("history.csv", upload.data).first_sheet()

    assert grid == [["Chapter", "2021"], ["Alpha Beta", 5]]


def test_records_from_grid_disambiguates_duplicate_and_blank_labels():
    grid = [["Title row", None, None], ["Name", "Name", None], ["a", "b", "c"]]

    headers, rows = records_from_grid(grid, header_row=1)

    assert headers == ["Name", "Name_1", "__EMPTY"]
    assert rows == [{"Name": "a", "Name_1": "b", "__EMPTY": "c"}]
    assert records_from_grid(grid, header_row=5) == ([], [])
