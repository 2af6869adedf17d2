# portal_app/models/activity.py

from .base import BaseModel, db


class PiaEntry(BaseModel):
    """Program impact activity reported by a chapter."""

    __tablename__ = "pia_entries"

    id = db.Column(db.Integer, primary_key=True)
    chapter_id = db.Column(db.String(36), db.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    activity_date = db.Column(db.Date, nullable=True)
    report_year = db.Column(db.Integer, nullable=True, index=True)
    hours = db.Column(db.Float, nullable=False, default=0.0)
    is_bbb = db.Column(db.Boolean, nullable=False, default=False)
    is_education = db.Column(db.Boolean, nullable=False, default=False)
    is_social = db.Column(db.Boolean, nullable=False, default=False)
    is_sbc = db.Column(db.Boolean, nullable=False, default=False)
    description = db.Column(db.Text, nullable=True)
    brothers_attending = db.Column(db.Integer, nullable=True)
    black_spend_amount = db.Column(db.Float, nullable=True)
    scholarship_funds_disbursed = db.Column(db.Float, nullable=True)

    chapter = db.relationship("Chapter", back_populates="pia_entries")

    def __repr__(self):
        return f"<PiaEntry chapter={self.chapter_id} date={self.activity_date}>"
