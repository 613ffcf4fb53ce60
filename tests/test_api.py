"""Tests for API functionality."""

import tempfile
from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient

    from notesilo.api.app import create_app, generate_token
    FASTAPI_AVAILABLE = True
except ImportError:
    FASTAPI_AVAILABLE = False
    TestClient = None  # type: ignore

from notesilo.runtime import build_runtime

pytestmark = pytest.mark.skipif(not FASTAPI_AVAILABLE, reason="FastAPI not installed")


@pytest.fixture
def runtime():
    """Create a runtime over a temporary notes directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        notes = Path(tmpdir) / "notes"
        rt = build_runtime(notes_path=notes)
        rt.workspace.create_note("Foo", content="foo body")
        rt.workspace.create_note("Other", content="see [[Foo]]")
        yield rt


@pytest.fixture
def client(runtime):
    """Create test client without auth."""
    return TestClient(create_app(runtime, token=None))


def test_health(client):
    """Test the health endpoint reports the note count."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "notes": 2}


def test_auth_required():
    """Requests without the bearer token are rejected."""
    with tempfile.TemporaryDirectory() as tmpdir:
        rt = build_runtime(notes_path=Path(tmpdir))
        token = generate_token()
        client = TestClient(create_app(rt, token=token))

        assert client.get("/health").status_code == 401
        bad = {"Authorization": "Bearer nope"}
        assert client.get("/health", headers=bad).status_code == 401
        good = {"Authorization": f"Bearer {token}"}
        assert client.get("/health", headers=good).status_code == 200


def test_list_and_read(client):
    """Test listing notes and reading one by key."""
    keys = [n["key"] for n in client.get("/notes").json()]
    assert keys == ["Foo.md", "Other.md"]

    response = client.get("/notes/Foo.md")
    assert response.status_code == 200
    assert response.json()["content"] == "foo body"

    assert client.get("/notes/Missing.md").status_code == 404


def test_create_note_in_dir(client):
    """Test creating a note under a logical directory."""
    response = client.post("/notes", json={"title": "Plan", "dir": "work"})
    assert response.status_code == 201
    assert response.json()["path"] == "work/Plan.md"
    assert [n["key"] for n in client.get("/notes", params={"dir": "work"}).json()] == ["Plan.md"]


def test_update_note(client, runtime):
    """Test that a content update is written to the note file."""
    response = client.put("/notes/Foo.md", json={"content": "changed"})
    assert response.status_code == 200
    assert response.json()["content"] == "changed"
    root = runtime.config.notes.root
    assert (root / "Foo.md").read_text() == "changed"


def test_rename(client, runtime):
    """Test renaming a note and rewriting its backlinks over the API."""
    response = client.post("/notes/Foo.md/rename", json={"title": "Bar"})
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "success"
    assert data["newKey"] == "Bar.md"
    assert data["linksRewritten"] == 1
    assert client.get("/notes/Other.md").json()["content"] == "see [[Bar]]"
    assert client.get("/notes/Foo.md").status_code == 404


def test_rename_conflicts(client):
    """Test the status codes of refused renames."""
    response = client.post("/notes/Foo.md/rename", json={"title": "OTHER"})
    assert response.status_code == 409
    assert response.json()["detail"]["status"] == "duplicate_title"

    assert client.post("/notes/Nope.md/rename", json={"title": "X"}).status_code == 404

    client.post("/notes", json={"title": "2024-01-01"})
    response = client.post("/notes/2024-01-01.md/rename", json={"title": "X"})
    assert response.status_code == 423


def test_backlinks(client):
    """Test listing a note's backlinks."""
    response = client.get("/notes/Foo.md/backlinks")
    assert response.status_code == 200
    assert [n["key"] for n in response.json()] == ["Other.md"]


def test_delete(client):
    """Test deleting a note."""
    assert client.delete("/notes/Foo.md").status_code == 204
    assert client.get("/notes/Foo.md").status_code == 404


def test_search_and_suggest(client):
    """Test search results and link suggestions."""
    results = client.get("/search", params={"q": "foo"}).json()
    assert results[0]["key"] == "Foo.md"

    suggestions = client.get("/suggest", params={"q": "oth"}).json()
    assert suggestions == [{"title": "Other", "url": "Other"}]


def test_view_dispatch(client):
    """Test dispatching view actions and reading the current note."""
    response = client.post("/view", json={"view": "md", "noteId": "Foo.md", "stackIds": ["Foo.md"]})
    assert response.status_code == 200
    data = response.json()
    assert data["state"]["view"] == "md"
    assert data["state"]["params"]["noteId"] == "Foo.md"
    assert data["currentNoteId"] == "Foo.md"

    response = client.post("/view", json={"view": "tag", "tag": "ideas"})
    assert response.json()["state"] == {"view": "tag", "tag": "ideas"}
    assert client.get("/current").json() == {"currentNoteId": None}


def test_view_dispatch_invalid(client):
    """Test that invalid view actions are rejected."""
    assert client.post("/view", json={"view": "nope"}).status_code == 422
    assert client.post("/view", json={"view": "md"}).status_code == 422
    assert client.get("/view").json()["state"] == {"view": "default"}


def test_open_link(client):
    """Test following a link to a missing note creates and opens it."""
    response = client.post("/open", json={"href": "New%20Idea#Top"})
    data = response.json()
    assert data["key"] == "New Idea.md"
    assert data["currentNoteId"] == "New Idea.md"
    assert data["state"]["params"]["hash"] == "Top"
