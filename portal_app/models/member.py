# portal_app/models/member.py

from sqlalchemy import Index

from .base import BaseModel, db


class Member(BaseModel):
    """Chapter roster entry keyed by (chapter, member number)."""

    __tablename__ = "members"

    id = db.Column(db.Integer, primary_key=True)
    chapter_id = db.Column(db.String(36), db.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    member_number = db.Column(db.String(50), nullable=False)
    initiated_date = db.Column(db.Date, nullable=True)
    financial_through_year = db.Column(db.Integer, nullable=True)
    status = db.Column(db.String(50), nullable=False, default="Active")
    transitioned_alumni_chapter_id = db.Column(
        db.String(36), db.ForeignKey("chapters.id", ondelete="SET NULL"), nullable=True
    )
    graduation_year = db.Column(db.Integer, nullable=True)

    chapter = db.relationship("Chapter", back_populates="members", foreign_keys=[chapter_id])

    __table_args__ = (db.UniqueConstraint("chapter_id", "member_number", name="_chapter_member_number_uc"),)

    def __repr__(self):
        return f"<Member {self.member_number} chapter={self.chapter_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "chapter_id": self.chapter_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "member_number": self.member_number,
            "initiated_date": self.initiated_date.isoformat() if self.initiated_date else None,
            "financial_through_year": self.financial_through_year,
            "status": self.status,
            "graduation_year": self.graduation_year,
        }


class AlumniMember(BaseModel):
    """Alumni census record keyed by member number."""

    __tablename__ = "alumni_members"

    id = db.Column(db.Integer, primary_key=True)
    member_number = db.Column(db.String(50), nullable=False, unique=True, index=True)
    full_name = db.Column(db.String(200), nullable=True)
    first_name = db.Column(db.String(100), nullable=True)
    last_name = db.Column(db.String(100), nullable=True)
    email = db.Column(db.String(255), nullable=True)

    affiliated_chapter_id = db.Column(
        db.String(36), db.ForeignKey("chapters.id", ondelete="SET NULL"), nullable=True
    )
    affiliated_chapter = db.Column(db.String(200), nullable=True)
    affiliated_chapter_number = db.Column(db.String(50), nullable=True)
    affiliated_chapter_region = db.Column(db.String(100), nullable=True)
    affiliated_chapter_university = db.Column(db.String(200), nullable=True)

    initiated_chapter = db.Column(db.String(200), nullable=True)
    initiated_chapter_region = db.Column(db.String(100), nullable=True)
    initiated_chapter_university = db.Column(db.String(200), nullable=True)
    initiated_year = db.Column(db.Integer, nullable=True)
    initiated_date = db.Column(db.Date, nullable=True)

    member_type = db.Column(db.String(100), nullable=True)
    life_member_type = db.Column(db.String(100), nullable=True)
    currently_financial = db.Column(db.Boolean, nullable=True)
    consecutive_dues = db.Column(db.Integer, nullable=True)
    financial_through = db.Column(db.Integer, nullable=True)

    career_field_code = db.Column(db.String(50), nullable=True)
    career_field = db.Column(db.String(200), nullable=True)
    military_affiliation = db.Column(db.String(200), nullable=True)
    active_duty = db.Column(db.Boolean, nullable=True)
    last_rank_achieved = db.Column(db.String(100), nullable=True)

    former_sbc = db.Column(db.Boolean, nullable=True)
    dsc_member = db.Column(db.Boolean, nullable=True)
    dsc_number = db.Column(db.String(50), nullable=True)
    al_locke_scholar = db.Column(db.Boolean, nullable=True)
    al_locke_scholar_number = db.Column(db.String(50), nullable=True)
    jt_floyd_hof_member = db.Column(db.Boolean, nullable=True)

    __table_args__ = (Index("idx_alumni_affiliated_chapter", "affiliated_chapter_id"),)

    def __repr__(self):
        return f"<AlumniMember {self.member_number}>"
