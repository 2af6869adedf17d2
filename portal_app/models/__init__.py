# portal_app/models/__init__.py
"""
Database models package
"""

from .activity import PiaEntry
from .audit import SiteSetting, Upload
from .base import BaseModel, db
from .chapter import Chapter, ChapterType, YearlyHistory
from .member import AlumniMember, Member

__all__ = [
    "db",
    "BaseModel",
    "Chapter",
    "ChapterType",
    "YearlyHistory",
    "Member",
    "AlumniMember",
    "PiaEntry",
    "Upload",
    "SiteSetting",
]
