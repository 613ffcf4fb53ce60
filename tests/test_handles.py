"""Tests for FileHandleRegistry."""

import logging

from conftest import MemoryFileAccess

from notesilo.core.handles import FileHandleRegistry


def test_unsupported_capability_is_inert():
    """Test that an unsupported capability is never called."""
    access = MemoryFileAccess(supported=False)
    registry = FileHandleRegistry(access)
    assert not registry.supported
    assert registry.get_or_create("Foo") is None
    assert registry.write("Foo", "x") is False
    assert registry.delete("Foo") is True
    assert access.calls == []


def test_no_capability():
    """Test the registry without any file access."""
    registry = FileHandleRegistry(None)
    assert not registry.supported
    assert registry.read("Foo") is None


def test_write_creates_handle_lazily():
    """Test that the first write creates the handle."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    assert registry.get("Foo") is None
    assert registry.write("Foo", "hello")
    assert registry.get("Foo") is not None
    assert access.files["Foo"] == "hello"
    assert registry.read("Foo") == "hello"


def test_get_or_create_reuses_handle():
    """Test that handles are cached by title."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    first = registry.get_or_create("Foo")
    assert registry.get_or_create("Foo") is first
    assert access.calls.count(("open", "Foo")) == 1


def test_write_failure_is_downgraded(caplog):
    """Test that a write failure is logged and reported, not raised."""
    access = MemoryFileAccess()
    access.fail["write"].add("Foo")
    seen = []
    registry = FileHandleRegistry(access, on_io_failure=seen.append)
    with caplog.at_level(logging.WARNING):
        assert registry.write("Foo", "x") is False
    assert len(seen) == 1
    assert seen[0].op == "write"
    assert "write failed" in caplog.text


def test_delete_removes_entry_and_file():
    """Test deleting a handle and its file."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    registry.write("Foo", "x")
    assert registry.delete("Foo")
    assert registry.get("Foo") is None
    assert "Foo" not in access.files
    assert registry.delete("Foo")


def test_swap_moves_content():
    """Test moving a note's file to a new title."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    registry.write("Old", "body")
    assert registry.swap("Old", "New", "body") == []
    assert registry.get("Old") is None
    assert registry.get("New") is not None
    assert access.files == {"New": "body"}


def test_swap_order_writes_new_before_deleting_old():
    """Test that the new file is written before the old one is deleted."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    registry.write("Old", "body")
    access.calls.clear()
    registry.swap("Old", "New", "body")
    assert access.calls == [("open", "New"), ("write", "New"), ("delete", "Old")]


def test_swap_keeps_old_file_when_new_write_fails():
    """Test that a failed write keeps the old file on disk."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    registry.write("Old", "body")
    access.fail["write"].add("New")

    failures = registry.swap("Old", "New", "body")

    assert [f.op for f in failures] == ["write"]
    assert registry.get("Old") is None
    assert access.files["Old"] == "body"


def test_swap_reports_delete_failure():
    """Test that a failed delete is reported."""
    access = MemoryFileAccess()
    registry = FileHandleRegistry(access)
    registry.write("Old", "body")
    access.fail["delete"].add("Old")

    failures = registry.swap("Old", "New", "body")

    assert [f.op for f in failures] == ["delete"]
    assert registry.get("Old") is None
    assert access.files["New"] == "body"


def test_swap_same_file_does_not_delete():
    """Test that a case-only rename does not delete the file."""
    access = MemoryFileAccess()
    access.same_handle = lambda a, b: True
    registry = FileHandleRegistry(access)
    registry.write("foo", "body")
    access.calls.clear()
    assert registry.swap("foo", "Foo", "body") == []
    assert ("delete", "foo") not in access.calls
    assert registry.get("foo") is None


def test_sync_collects_failures():
    """Test that sync writes every note and collects failures."""
    access = MemoryFileAccess()
    reported = []
    registry = FileHandleRegistry(access, on_io_failure=reported.append)
    access.fail["open"].add("B")

    failures = registry.sync([("A", "a"), ("B", "b"), ("C", "c")])

    assert [(f.op, f.title) for f in failures] == [("open", "B")]
    assert reported == failures
    assert access.files == {"A": "a", "C": "c"}
