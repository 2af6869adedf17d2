# portal_app/models/chapter.py

import enum
import uuid

from sqlalchemy import Enum, Index

from .base import BaseModel, db


def _new_id() -> str:
    return str(uuid.uuid4())


class ChapterType(str, enum.Enum):
    """Chapter classification."""

    COLLEGIATE = "Collegiate"
    ALUMNI = "Alumni"

    @classmethod
    def from_label(cls, value, default=None):
        """Map free-form text onto a classification; ``c...`` means collegiate."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return default
        if text.startswith("c"):
            return cls.COLLEGIATE
        if text.startswith("a"):
            return cls.ALUMNI
        return default


class Chapter(BaseModel):
    """A local unit of the organization."""

    __tablename__ = "chapters"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    code = db.Column(db.String(200), nullable=True)
    name = db.Column(db.String(200), nullable=False, unique=True, index=True)
    type = db.Column(
        Enum(ChapterType, name="chapter_type_enum", values_callable=lambda members: [m.value for m in members]),
        nullable=False,
        default=ChapterType.ALUMNI,
    )
    city = db.Column(db.String(200), nullable=True)
    university = db.Column(db.String(200), nullable=True)
    charter_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(50), nullable=True, default="Active")
    instagram_url = db.Column(db.String(500), nullable=True)
    facebook_url = db.Column(db.String(500), nullable=True)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)

    history = db.relationship(
        "YearlyHistory",
        back_populates="chapter",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    members = db.relationship(
        "Member",
        back_populates="chapter",
        cascade="all, delete-orphan",
        passive_deletes=True,
        foreign_keys="Member.chapter_id",
    )
    pia_entries = db.relationship(
        "PiaEntry",
        back_populates="chapter",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Chapter {self.name}>"

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "type": self.type.value if self.type else None,
            "city": self.city,
            "university": self.university,
            "charter_date": self.charter_date.isoformat() if self.charter_date else None,
            "status": self.status,
            "instagram_url": self.instagram_url,
            "facebook_url": self.facebook_url,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


class YearlyHistory(BaseModel):
    """Membership snapshot for a chapter in a year (quarter 0 is the whole year)."""

    __tablename__ = "yearly_history"

    id = db.Column(db.Integer, primary_key=True)
    chapter_id = db.Column(db.String(36), db.ForeignKey("chapters.id", ondelete="CASCADE"), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    quarter = db.Column(db.Integer, nullable=False, default=0)
    quarter_start_date = db.Column(db.Date, nullable=True)
    active_members = db.Column(db.Integer, nullable=False, default=0)
    notes = db.Column(db.Text, nullable=True)

    chapter = db.relationship("Chapter", back_populates="history")

    __table_args__ = (
        db.UniqueConstraint("chapter_id", "year", "quarter", name="_chapter_year_quarter_uc"),
        Index("idx_history_chapter_year", "chapter_id", "year"),
    )

    def __repr__(self):
        return f"<YearlyHistory chapter={self.chapter_id} year={self.year} q={self.quarter}>"

    def to_dict(self):
        return {
            "chapter_id": self.chapter_id,
            "year": self.year,
            "quarter": self.quarter,
            "quarter_start_date": self.quarter_start_date.isoformat() if self.quarter_start_date else None,
            "active_members": self.active_members,
            "notes": self.notes,
        }
