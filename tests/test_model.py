"""Tests for the note model."""

from notesilo.core.model import (
    Note,
    ViewParams,
    ViewState,
    fold_title,
    is_daily_title,
    note_key,
    title_from_key,
    titles_equal,
)


def test_key_derived_from_title():
    """Test that the key is the title plus .md."""
    assert note_key("Foo") == "Foo.md"
    assert title_from_key("Foo.md") == "Foo"
    assert title_from_key("journal/Foo.md") == "Foo"


def test_new_note_path_follows_parent_dir():
    """Test the note path under a parent directory."""
    note = Note.new("Foo", "journal")
    assert note.key == "Foo.md"
    assert note.path == "journal/Foo.md"
    assert note.parent_dir == "journal"

    flat = Note.new("Foo")
    assert flat.path == "Foo.md"
    assert flat.parent_dir == ""


def test_titles_compare_case_insensitively():
    """Test case-insensitive title comparison."""
    assert titles_equal("Foo", "foo")
    assert titles_equal(" Foo ", "FOO")
    assert not titles_equal("Foo", "Food")
    assert not titles_equal(None, "Foo")
    assert fold_title("Straße") == fold_title("STRASSE")


def test_daily_titles():
    """Test daily note title detection."""
    assert is_daily_title("2024-01-31")
    assert is_daily_title("2024-1-3")
    assert not is_daily_title("2024-01-31 notes")
    assert not is_daily_title("Meeting")
    assert Note.new("2024-02-29").is_daily


def test_empty_content_shows_sentinel():
    """Test the display content of an empty note."""
    note = Note.new("Foo")
    assert note.content == ""
    assert note.display_content == " "
    assert Note(key="Bar.md", title="Bar", content=None).content == ""  # type: ignore[arg-type]


def test_with_content_bumps_updated_at():
    """Test that new content bumps updated_at."""
    note = Note.new("Foo", content="a")
    updated = note.with_content("b")
    assert updated.content == "b"
    assert updated.updated_at >= note.updated_at
    assert note.content == "a"


def test_renamed_keeps_parent_dir():
    """Test that renaming keeps the parent directory."""
    note = Note.new("Foo", "work", "body")
    renamed = note.renamed("Bar")
    assert renamed.key == "Bar.md"
    assert renamed.title == "Bar"
    assert renamed.path == "work/Bar.md"
    assert renamed.content == "body"
    assert renamed.created_at == note.created_at


def test_view_state_to_dict():
    """Test the JSON shape of the view state."""
    state = ViewState(view="md", params=ViewParams(note_id="Foo.md", stack_ids=("A.md",), hash="h"))
    assert state.to_dict() == {
        "view": "md",
        "params": {"noteId": "Foo.md", "stackIds": ["A.md"], "hash": "h"},
    }
    assert ViewState(view="tag", tag="todo").to_dict() == {"view": "tag", "tag": "todo"}
