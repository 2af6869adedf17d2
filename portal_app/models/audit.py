# portal_app/models/audit.py

from .base import BaseModel, db, utc_now


class Upload(BaseModel):
    """Append-only record of a successful import, labelled by kind."""

    __tablename__ = "uploads"

    id = db.Column(db.Integer, primary_key=True)
    kind = db.Column(db.String(50), nullable=False, index=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utc_now, index=True)

    def __repr__(self):
        return f"<Upload {self.kind} at {self.occurred_at}>"


class SiteSetting(BaseModel):
    """Singleton key/value store for site-wide values."""

    __tablename__ = "site_settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=True)

    def __repr__(self):
        return f"<SiteSetting {self.key}>"
