from datetime import date, datetime, timezone

from portal_app.importer.audit import record_upload, touch_last_yearly_upload
from portal_app.models import Member, PiaEntry, YearlyHistory, db


def test_list_chapters_is_ordered_by_name(client, chapters):
    response = client.get("/api/chapters")

    assert response.status_code == 200
    assert [row["name"] for row in response.get_json()] == ["Alpha Beta", "Delta Kappa", "Gamma Sigma"]


def test_get_unknown_chapter_returns_404(client, chapters):
    assert client.get("/api/chapters/does-not-exist").status_code == 404
    assert client.get(f"/api/chapters/{chapters['Alpha Beta']}").get_json()["type"] == "Collegiate"


def test_history_yearly_returns_whole_year_snapshots(client, chapters):
    chapter_id = chapters["Alpha Beta"]
    db.session.add_all(
        [
            YearlyHistory(chapter_id=chapter_id, year=2022, quarter=0, active_members=15),
            YearlyHistory(chapter_id=chapter_id, year=2021, quarter=0, active_members=12),
            YearlyHistory(chapter_id=chapter_id, year=2022, quarter=3, active_members=99),
        ]
    )
    db.session.commit()

    response = client.get(f"/api/chapters/{chapter_id}/history-yearly")

    assert response.get_json() == [
        {"year": 2021, "active_members": 12},
        {"year": 2022, "active_members": 15},
    ]
    assert client.get("/api/chapters/missing/history-yearly").status_code == 404


def test_roster_endpoint_shapes_members(client, chapters):
    chapter_id = chapters["Gamma Sigma"]
    db.session.add_all(
        [
            Member(chapter_id=chapter_id, member_number="2", first_name="Zed", last_name="Young", status="Active"),
            Member(
                chapter_id=chapter_id,
                member_number="1",
                first_name="Ana",
                last_name="adams",
                initiated_date=date(2015, 5, 1),
                financial_through_year=2024,
                status="Not Financial",
            ),
        ]
    )
    db.session.commit()

    rows = client.get(f"/api/chapters/{chapter_id}/roster").get_json()

    assert [row["last_name"] for row in rows] == ["adams", "Young"]
    assert rows[0]["initiated_date"] == "2015-05-01"
    assert rows[0]["financial_through"] == 2024
    assert rows[1]["transitioned_alumni_chapter_id"] is None


def test_yearly_last_upload_prefers_audit_log(client, app):
    assert client.get("/api/stats/yearly-last-upload").get_json() == {"last_upload_at": None}

    touch_last_yearly_upload(datetime(2023, 1, 1, tzinfo=timezone.utc))
    db.session.commit()
    assert client.get("/api/stats/yearly-last-upload").get_json()["last_upload_at"].startswith("2023-01-01")

    record_upload("history", occurred_at=datetime(2024, 6, 1, 8, 30, tzinfo=timezone.utc))
    record_upload("pia", occurred_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    db.session.commit()
    assert client.get("/api/stats/yearly-last-upload").get_json()["last_upload_at"].startswith("2024-06-01T08:30")


def test_pia_summary_totals_hours_by_program(client, chapters):
    chapter_id = chapters["Alpha Beta"]
    db.session.add_all(
        [
            PiaEntry(chapter_id=chapter_id, hours=3.0, is_bbb=True, black_spend_amount=100.0),
            PiaEntry(chapter_id=chapter_id, hours=2.0, is_social=True, is_bbb=True, scholarship_funds_disbursed=50.0),
            PiaEntry(chapter_id=chapters["Gamma Sigma"], hours=9.0, is_sbc=True, black_spend_amount=5.0),
        ]
    )
    record_upload("pia", occurred_at=datetime(2024, 4, 1, tzinfo=timezone.utc))
    db.session.commit()

    summary = client.get(f"/api/chapters/{chapter_id}/pia/summary").get_json()

    assert summary["total_hours"] == 5.0
    assert summary["bbb_hours"] == 5.0
    assert summary["social_hours"] == 2.0
    assert summary["sbc_hours"] == 0
    assert summary["black_spend_total"] == 100.0
    assert summary["scholarship_total"] == 50.0
    assert summary["as_of"].startswith("2024-04-01")

    totals = client.get("/api/stats/pia/financial-totals").get_json()
    assert totals["black_spend_total"] == 105.0
    assert totals["scholarship_total"] == 50.0


def test_pia_summary_for_chapter_without_entries(client, chapters):
    summary = client.get(f"/api/chapters/{chapters['Delta Kappa']}/pia/summary").get_json()

    assert summary["total_hours"] == 0
    assert summary["as_of"] is None
