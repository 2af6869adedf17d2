import io
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from portal_app.models import Chapter, ChapterType, PiaEntry, db

CHAPTER_ROWS = [["Chapter", "Type", "Location"], ["Alpha Beta", "Collegiate", "State University"]]


def _count(model):
    return db.session.scalar(db.select(db.func.count()).select_from(model))


def test_import_requires_admin_key(client, xlsx_file):
    response = client.post(
        "/api/admin/chapters/import",
        data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 401
    assert response.get_json() == {"error": "Unauthorized"}

    response = client.post(
        "/api/admin/chapters/import",
        data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx")},
        headers={"X-Admin-Key": "wrong"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 401
    assert _count(Chapter) == 0


def test_import_without_file_is_bad_request(client, admin_headers):
    response = client.post("/api/admin/chapters/import", headers=admin_headers, data={})

    assert response.status_code == 400
    assert "chaptersFile" in response.get_json()["error"]


def test_import_rejects_unsupported_extension(client, admin_headers):
    response = client.post(
        "/api/admin/chapters/import",
        headers=admin_headers,
        data={"chaptersFile": (io.BytesIO(b"Chapter\nAlpha\n"), "chapters.txt")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert "Unsupported file type" in response.get_json()["error"]


def test_chapters_import_success_and_dry_run(client, admin_headers, xlsx_file):
    response = client.post(
        "/api/admin/chapters/import?dryRun=1",
        headers=admin_headers,
        data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["ok"] is True
    assert body["dryRun"] is True
    assert body["inserted"] == 1
    assert _count(Chapter) == 0

    response = client.post(
        "/api/admin/chapters/import",
        headers=admin_headers,
        data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx"), "dry_run": "false"},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    body = response.get_json()
    assert body["dryRun"] is False
    assert body["imported"] == 1
    assert _count(Chapter) == 1


def test_history_import_uses_chapter_type_form_field(client, admin_headers, xlsx_file):
    response = client.post(
        "/api/admin/history/import",
        headers=admin_headers,
        data={
            "historyFile": xlsx_file([["Chapter", "2022"], ["Tau Rho", 11]], filename="history.xlsx"),
            "chapterType": "collegiate",
        },
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["shape"] == "wide"
    assert body["created_entities"] == ["Tau Rho"]
    created = db.session.scalars(db.select(Chapter).where(Chapter.name == "Tau Rho")).one()
    assert created.type is ChapterType.COLLEGIATE


def test_history_import_with_bad_layout_returns_message(client, admin_headers, xlsx_file):
    response = client.post(
        "/api/admin/history/import",
        headers=admin_headers,
        data={"historyFile": xlsx_file([["Name", "Total"], ["Tau Rho", 11]], filename="history.xlsx")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert response.get_json()["error"].startswith("Provide LONG")


def test_eoy_import_accepts_multiple_files(client, admin_headers, xlsx_file, chapters):
    region_rows = [["Chapter", "Active Members"]] + [[None, None]] * 22 + [["Alpha Beta", 27]]
    response = client.post(
        "/api/admin/eoy/import",
        headers=admin_headers,
        data={
            "eoyFile": [
                xlsx_file([["Totals"]], filename="summary.xlsx"),
                xlsx_file(sheets={"Southeastern": region_rows}, filename="EOY 2022 Report.xlsx"),
            ]
        },
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["kind"] == "yearly"
    assert body["year"] == 2022
    assert body["rows"] == 1


def test_eoy_import_without_files(client, admin_headers):
    response = client.post("/api/admin/eoy/import", headers=admin_headers, data={})

    assert response.status_code == 400
    assert response.get_json() == {"error": "Upload eoyFile"}


def test_pia_import_accepts_alternate_file_field(client, admin_headers, xlsx_file, chapters):
    rows = [["Chapter", "Date", "Hours"], ["Alpha Beta", "2024-01-05", 3]]
    response = client.post(
        "/api/admin/pia/import",
        headers=admin_headers,
        data={"upload": xlsx_file(rows, filename="pia.xlsx")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 200
    assert response.get_json()["inserted"] == 1
    assert _count(PiaEntry) == 1


def test_roster_import_reports_unknown_chapters(client, admin_headers, xlsx_file, chapters):
    rows = [["Chapter", "Member Number"], ["Alpha Beta", "A1"], ["Missing Chapter", "B2"]]
    response = client.post(
        "/api/admin/roster/import",
        headers=admin_headers,
        data={"rosterFile": xlsx_file(rows, filename="roster.xlsx")},
        content_type="multipart/form-data",
    )

    body = response.get_json()
    assert response.status_code == 200
    assert body["imported"] == 1
    assert body["skipped"] == 1
    assert body["unknown_entities"] == ["Missing Chapter"]


def test_alumni_import_accepts_csv_only(client, admin_headers, xlsx_file):
    response = client.post(
        "/api/admin/alumni/import",
        headers=admin_headers,
        data={"alumniFile": xlsx_file([["Member #"], ["1"]], filename="alumni.xlsx")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 400

    response = client.post(
        "/api/admin/alumni/import",
        headers=admin_headers,
        data={"alumniFile": (io.BytesIO(b"Member #,Full Name\n1001,Jamal Reed\n"), "alumni.csv")},
        content_type="multipart/form-data",
    )
    assert response.status_code == 200
    assert response.get_json()["total"] == 1


def test_storage_failure_maps_to_server_error(client, admin_headers, xlsx_file):
    failure = OperationalError("INSERT INTO chapters", {}, Exception("disk I/O error"))

    with patch.object(db.session, "commit", side_effect=failure):
        response = client.post(
            "/api/admin/chapters/import",
            headers=admin_headers,
            data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx")},
            content_type="multipart/form-data",
        )

    assert response.status_code == 500
    assert response.get_json() == {"error": "Import failed", "detail": "disk I/O error"}


def test_disabled_importer_returns_not_found(app, client, admin_headers, xlsx_file):
    app.config["IMPORTER_ENABLED"] = False

    response = client.post(
        "/api/admin/chapters/import",
        headers=admin_headers,
        data={"chaptersFile": xlsx_file(CHAPTER_ROWS, filename="chapters.xlsx")},
        content_type="multipart/form-data",
    )

    assert response.status_code == 404
    assert response.get_json() == {"error": "Importer is disabled."}
