"""Shared fixtures: an in-memory file access capability with fault injection."""

import pytest

from notesilo.adapters.search import SubstringSearch
from notesilo.core.store import NoteStore
from notesilo.core.workspace import Workspace


class MemoryHandle:
    def __init__(self, title):
        self.title = title

    def __repr__(self):
        return f"MemoryHandle({self.title!r})"


class MemoryFileAccess:
    """Files live in a dict; ``fail`` maps an operation name to titles that raise."""

    def __init__(self, supported=True):
        self.supported = supported
        self.files: dict[str, str] = {}
        self.handles: dict[str, MemoryHandle] = {}
        self.fail: dict[str, set[str]] = {"open": set(), "write": set(), "delete": set()}
        self.calls: list[tuple[str, str]] = []

    def _check(self, op, title):
        self.calls.append((op, title))
        if title in self.fail[op]:
            raise PermissionError(f"{op} denied for {title}")

    def is_supported(self):
        return self.supported

    def get_or_create_handle(self, title):
        self._check("open", title)
        handle = self.handles.get(title)
        if handle is None:
            handle = self.handles[title] = MemoryHandle(title)
            self.files.setdefault(title, "")
        return handle

    def write(self, handle, content):
        self._check("write", handle.title)
        self.files[handle.title] = content

    def read(self, handle):
        return self.files[handle.title]

    def delete_handle(self, title):
        self._check("delete", title)
        self.handles.pop(title, None)
        self.files.pop(title, None)

    def same_handle(self, a, b):
        return a is b

    def list_titles(self):
        return list(self.files)


class MemorySnapshot:
    def __init__(self):
        self.writes = []

    def write(self, notes, tree):
        self.writes.append(([n.to_dict() for n in notes], {d: list(k) for d, k in tree.items()}))

    def read(self):
        if not self.writes:
            return None
        notes, tree = self.writes[-1]
        return {"version": 1, "notes": notes, "tree": tree}


@pytest.fixture
def access():
    return MemoryFileAccess()


@pytest.fixture
def snapshot():
    return MemorySnapshot()


@pytest.fixture
def store():
    return NoteStore()


@pytest.fixture
def workspace(store, access, snapshot):
    return Workspace(store=store, access=access, snapshot=snapshot, search=SubstringSearch(store))
