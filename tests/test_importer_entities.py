import pytest

from portal_app.importer.entities import ChapterResolver, name_key
from portal_app.models import Chapter, ChapterType, db


def test_name_key_collapses_whitespace_and_case():
    assert name_key("  Alpha   BETA ") == "alpha beta"
    assert name_key(None) == ""


def test_lookup_matches_trimmed_case_insensitive_names(chapters):
    resolver = ChapterResolver.load()

    assert resolver.lookup("  alpha   beta ") == chapters["Alpha Beta"]
    assert resolver.lookup("GAMMA SIGMA") == chapters["Gamma Sigma"]
    assert resolver.lookup("Alpha Bet") is None
    assert resolver.lookup("") is None


def test_resolve_or_create_reserves_one_id_per_name(chapters):
    resolver = ChapterResolver.load()

    existing_id, created = resolver.resolve_or_create("Alpha Beta")
    assert (existing_id, created) == (chapters["Alpha Beta"], False)

    new_id, created = resolver.resolve_or_create("Theta  Chi", ChapterType.COLLEGIATE)
    assert created is True
    again_id, created_again = resolver.resolve_or_create("theta chi")
    assert again_id == new_id
    assert created_again is False
    assert [pending.name for pending in resolver.pending] == ["Theta Chi"]

    # Nothing reaches storage until the pending chapters are persisted.
    assert db.session.get(Chapter, new_id) is None

    assert resolver.persist_pending() == 1
    db.session.commit()

    stored = db.session.get(Chapter, new_id)
    assert stored.name == "Theta Chi"
    assert stored.type is ChapterType.COLLEGIATE
    assert stored.status == "Active"
    assert resolver.pending == []


def test_resolve_or_create_rejects_blank_names(app):
    resolver = ChapterResolver.load()
    with pytest.raises(ValueError):
        resolver.resolve_or_create("   ")


def test_chapter_type_from_label():
    assert ChapterType.from_label("collegiate") is ChapterType.COLLEGIATE
    assert ChapterType.from_label("College") is ChapterType.COLLEGIATE
    assert ChapterType.from_label("Alumni") is ChapterType.ALUMNI
    assert ChapterType.from_label("", default=ChapterType.ALUMNI) is ChapterType.ALUMNI
    assert ChapterType.from_label("graduate") is None
