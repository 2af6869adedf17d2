# portal_app/routes/api.py

"""
Public JSON endpoints reading the imported data.
"""

from http import HTTPStatus

from flask import current_app, jsonify

from portal_app.importer.audit import YEARLY_KINDS, get_last_upload_at, get_last_yearly_upload
from portal_app.models import Chapter, Member, PiaEntry, YearlyHistory, db


def _isoformat(moment):
    return moment.isoformat() if moment else None


def _flag_hours(flag):
    return db.func.coalesce(db.func.sum(db.case((flag.is_(True), PiaEntry.hours), else_=0)), 0)


def _pia_totals(*criteria):
    row = db.session.execute(
        db.select(
            db.func.coalesce(db.func.sum(PiaEntry.hours), 0).label("total_hours"),
            _flag_hours(PiaEntry.is_bbb).label("bbb_hours"),
            _flag_hours(PiaEntry.is_social).label("social_hours"),
            _flag_hours(PiaEntry.is_education).label("education_hours"),
            _flag_hours(PiaEntry.is_sbc).label("sbc_hours"),
            db.func.coalesce(db.func.sum(PiaEntry.black_spend_amount), 0).label("black_spend_total"),
            db.func.coalesce(db.func.sum(PiaEntry.scholarship_funds_disbursed), 0).label("scholarship_total"),
        ).where(*criteria)
    ).one()
    return {key: float(value or 0) for key, value in row._mapping.items()}


def register_api_routes(app):
    """Register public read routes"""

    @app.route("/api/chapters", methods=["GET"])
    def api_list_chapters():
        chapters = db.session.scalars(db.select(Chapter).order_by(Chapter.name)).all()
        return jsonify([chapter.to_dict() for chapter in chapters])

    @app.route("/api/chapters/<chapter_id>", methods=["GET"])
    def api_get_chapter(chapter_id):
        chapter = db.session.get(Chapter, chapter_id)
        if chapter is None:
            return jsonify({"error": "Not found"}), HTTPStatus.NOT_FOUND
        return jsonify(chapter.to_dict())

    @app.route("/api/chapters/<chapter_id>/history-yearly", methods=["GET"])
    def api_chapter_history_yearly(chapter_id):
        """Whole-year snapshots for a chapter, oldest first."""
        if db.session.get(Chapter, chapter_id) is None:
            return jsonify({"error": "Not found"}), HTTPStatus.NOT_FOUND
        rows = db.session.execute(
            db.select(YearlyHistory.year, YearlyHistory.active_members)
            .where(YearlyHistory.chapter_id == chapter_id, YearlyHistory.quarter == 0)
            .order_by(YearlyHistory.year)
        ).all()
        return jsonify([{"year": year, "active_members": active} for year, active in rows])

    @app.route("/api/chapters/<chapter_id>/roster", methods=["GET"])
    def api_chapter_roster(chapter_id):
        members = db.session.scalars(
            db.select(Member)
            .where(Member.chapter_id == chapter_id)
            .order_by(db.func.lower(Member.last_name), db.func.lower(Member.first_name))
        ).all()
        return jsonify(
            [
                {
                    "id": member.id,
                    "first_name": member.first_name or "",
                    "last_name": member.last_name or "",
                    "member_number": member.member_number or "",
                    "initiated_date": _isoformat(member.initiated_date),
                    "financial_through": member.financial_through_year,
                    "status": member.status or "Active",
                    "graduation_year": member.graduation_year,
                    "transitioned_alumni_chapter_id": member.transitioned_alumni_chapter_id,
                }
                for member in members
            ]
        )

    @app.route("/api/stats/yearly-last-upload", methods=["GET"])
    def api_yearly_last_upload():
        last = get_last_upload_at(YEARLY_KINDS) or get_last_yearly_upload()
        current_app.logger.debug("Yearly last upload lookup returned %s", last)
        return jsonify({"last_upload_at": _isoformat(last)})

    @app.route("/api/stats/pia/financial-totals", methods=["GET"])
    def api_pia_financial_totals():
        totals = _pia_totals()
        return jsonify(
            {
                "black_spend_total": totals["black_spend_total"],
                "scholarship_total": totals["scholarship_total"],
                "as_of": _isoformat(get_last_upload_at(("pia",))),
            }
        )

    @app.route("/api/chapters/<chapter_id>/pia/summary", methods=["GET"])
    def api_chapter_pia_summary(chapter_id):
        """Program hours and money totals for one chapter's activity log."""
        payload = _pia_totals(PiaEntry.chapter_id == chapter_id)
        payload["as_of"] = _isoformat(get_last_upload_at(("pia",)))
        return jsonify(payload)
