"""Tests for substring search ranking."""

from datetime import datetime, timezone

from notesilo.adapters.search import SubstringSearch
from notesilo.core.model import Note
from notesilo.core.store import NoteStore


def _store():
    return NoteStore([
        Note.new("Notes on plans", content="nothing"),
        Note.new("Plan", content="the plan"),
        Note.new("Planning", content=""),
        Note.new("Diary", content="made a PLAN today, another plan"),
        Note.new("Unrelated", content="x"),
    ])


def test_ranking():
    """Exact title beats prefix, prefix beats substring, titles beat content."""
    matches = SubstringSearch(_store()).search("plan")
    assert [m.note.title for m in matches] == ["Plan", "Planning", "Notes on plans", "Diary"]


def test_content_spans():
    """Test match spans in content."""
    matches = SubstringSearch(_store()).search("  PLAN ")
    diary = next(m for m in matches if m.note.title == "Diary")
    assert diary.spans == [(7, 11), (27, 31)]
    assert diary.score == 1.0


def test_empty_query():
    """Test that an empty query matches nothing."""
    assert SubstringSearch(_store()).search("   ") == []


def test_ties_prefer_recent():
    """Test that ties go to the most recently updated note."""
    old = Note.new("alpha one")
    old.updated_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
    new = Note.new("alpha two")
    matches = SubstringSearch(NoteStore([old, new])).search("alpha")
    assert [m.note.title for m in matches] == ["alpha two", "alpha one"]
