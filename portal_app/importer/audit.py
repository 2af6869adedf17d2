"""Upload audit log and the dashboard's "last yearly upload" key."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from portal_app.models import SiteSetting, Upload, db

LAST_YEARLY_UPLOAD_KEY = "last_yearly_upload_at"
YEARLY_KINDS: tuple[str, ...] = ("yearly", "history")


def _as_utc(moment: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def record_upload(kind: str, *, occurred_at: datetime | None = None) -> Upload:
    """Append an audit record to the current session; the caller commits."""
    upload = Upload(kind=kind, occurred_at=occurred_at or datetime.now(timezone.utc))
    db.session.add(upload)
    return upload


def get_last_upload_at(kinds: Iterable[str]) -> datetime | None:
    """Most recent ``occurred_at`` among records whose kind is in ``kinds``."""
    kinds = tuple(kinds)
    if not kinds:
        return None
    latest = db.session.execute(
        db.select(db.func.max(Upload.occurred_at)).where(Upload.kind.in_(kinds))
    ).scalar_one_or_none()
    return _as_utc(latest)


def touch_last_yearly_upload(at: datetime | None = None) -> datetime:
    """Overwrite the singleton key; last write wins."""
    at = at or datetime.now(timezone.utc)
    setting = db.session.get(SiteSetting, LAST_YEARLY_UPLOAD_KEY)
    if setting is None:
        setting = SiteSetting(key=LAST_YEARLY_UPLOAD_KEY)
        db.session.add(setting)
    setting.value = at.isoformat()
    return at


def get_last_yearly_upload() -> datetime | None:
    setting = db.session.get(SiteSetting, LAST_YEARLY_UPLOAD_KEY)
    if setting is None or not setting.value:
        return None
    try:
        return _as_utc(datetime.fromisoformat(setting.value))
    except ValueError:
        return None
