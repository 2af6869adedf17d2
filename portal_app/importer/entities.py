"""Chapter name resolution for import pipelines."""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from portal_app.models import Chapter, ChapterType, db


def name_key(name) -> str:
    """Case- and whitespace-insensitive lookup key for a chapter name."""
    return " ".join(str(name or "").split()).lower()


@dataclass(frozen=True)
class PendingChapter:
    id: str
    name: str
    type: ChapterType


class ChapterResolver:
    """
    Name to chapter id index built from one bulk read per pipeline run.

    Matching is exact after trimming and lower-casing; there is no fuzzy
    matching. Names reserved through ``resolve_or_create`` are indexed
    immediately so later rows naming the same chapter share its id.
    """

    def __init__(self, index: dict[str, str]) -> None:
        self._index = dict(index)
        self._pending: dict[str, PendingChapter] = {}

    @classmethod
    def load(cls) -> "ChapterResolver":
        rows = db.session.execute(db.select(Chapter.id, Chapter.name)).all()
        return cls({name_key(name): chapter_id for chapter_id, name in rows})

    def lookup(self, name) -> str | None:
        key = name_key(name)
        if not key:
            return None
        return self._index.get(key)

    def resolve_or_create(self, name, chapter_type: ChapterType = ChapterType.ALUMNI) -> tuple[str, bool]:
        """Return ``(id, created)``; a miss reserves a fresh id for ``name``."""
        existing = self.lookup(name)
        if existing is not None:
            return existing, False
        key = name_key(name)
        if not key:
            raise ValueError("Chapter name is blank.")
        chapter_id = str(uuid.uuid4())
        self._index[key] = chapter_id
        self._pending[key] = PendingChapter(id=chapter_id, name=" ".join(str(name).split()), type=chapter_type)
        return chapter_id, True

    @property
    def pending(self) -> list[PendingChapter]:
        return list(self._pending.values())

    def persist_pending(self) -> int:
        """Add reserved chapters to the session; callers flush before writing dependents."""
        for pending in self._pending.values():
            db.session.add(Chapter(id=pending.id, name=pending.name, type=pending.type, status="Active"))
        count = len(self._pending)
        self._pending.clear()
        return count
