"""FastAPI application for the notesilo local JSON API."""

import secrets
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from .. import __version__
from ..core.errors import NotFound
from ..core.model import Note, ViewParams, ViewState
from ..core.rename import DUPLICATE_TITLE, NOT_FOUND, TITLE_LOCKED

_RENAME_STATUS_CODES = {DUPLICATE_TITLE: 409, NOT_FOUND: 404, TITLE_LOCKED: 423}


class NewNote(BaseModel):
    title: str = ""
    dir: str | None = None
    content: str = ""


class ContentUpdate(BaseModel):
    content: str


class RenameRequest(BaseModel):
    title: str


class ViewRequest(BaseModel):
    view: str
    noteId: str | None = None
    stackIds: list[str] | None = None
    hash: str | None = None
    tag: str | None = None


class LinkRequest(BaseModel):
    href: str


def _note_json(note: Note, content: bool = False) -> dict[str, Any]:
    data = note.to_dict()
    if content:
        data["content"] = note.display_content
    return data


def create_app(runtime: Any, token: str | None = None, enable_cors: bool = False) -> FastAPI:
    """
    Create FastAPI application with runtime injected.

    Args:
        runtime: Runtime instance with a workspace
        token: Bearer token for authentication (None to disable auth)
        enable_cors: Enable CORS middleware

    Returns:
        FastAPI application instance
    """
    ws = runtime.workspace

    app = FastAPI(
        title="notesilo API",
        description="Local JSON API for a notesilo notes directory",
        version=__version__,
        docs_url="/docs" if token is None else None,
        redoc_url="/redoc" if token is None else None,
    )

    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if token:
        security_scheme = HTTPBearer(auto_error=False)

        async def verify_token(
            credentials: HTTPAuthorizationCredentials | None = Security(security_scheme),  # noqa: B008
        ) -> None:
            """Verify bearer token."""
            if credentials is None or credentials.credentials != token:
                raise HTTPException(status_code=401, detail="Invalid or missing token")
    else:

        async def verify_token() -> None:
            """No-op when auth is disabled."""
            return None

    def get_note(key: str) -> Note:
        try:
            return ws.get(key)
        except NotFound as e:
            raise HTTPException(status_code=404, detail=str(e)) from e

    def view_json() -> dict[str, Any]:
        return {"state": ws.navigator.state.to_dict(), "currentNoteId": ws.current_note_id}

    @app.get("/health")
    async def health(auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Health check endpoint."""
        return {"status": "ok", "notes": len(ws.store)}

    @app.get("/notes")
    async def list_notes(
        dir: str | None = Query(None, description="Only notes in this directory"),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        notes = ws.store.notes_in_dir(dir) if dir is not None else list(ws.store)
        return [_note_json(n) for n in notes]

    @app.post("/notes", status_code=201)
    async def create_note(body: NewNote, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Find or create a note by title."""
        note = ws.create_note(body.title, parent_dir=body.dir, content=body.content)
        return _note_json(note, content=True)

    @app.post("/notes/{key:path}/rename")
    async def rename_note(
        key: str, body: RenameRequest, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        result = ws.rename(key, body.title)
        if not result.ok:
            raise HTTPException(
                status_code=_RENAME_STATUS_CODES.get(result.status, 400),
                detail={"status": result.status, "message": result.message},
            )
        return {
            "status": result.status,
            "key": result.key,
            "newKey": result.new_key,
            "linksRewritten": result.links_rewritten,
            "warnings": [str(f) for f in result.failures],
        }

    @app.get("/notes/{key:path}/backlinks")
    async def note_backlinks(key: str, auth: None = Depends(verify_token)) -> list[dict[str, Any]]:
        get_note(key)
        return [_note_json(n) for n in ws.backlinks(key)]

    @app.get("/notes/{key:path}")
    async def read_note(key: str, auth: None = Depends(verify_token)) -> dict[str, Any]:
        return _note_json(get_note(key), content=True)

    @app.put("/notes/{key:path}")
    async def update_note(
        key: str, body: ContentUpdate, auth: None = Depends(verify_token)
    ) -> dict[str, Any]:
        get_note(key)
        if not ws.update_content(key, body.content):
            raise HTTPException(status_code=409, detail=f"Note {key} is being renamed")
        return _note_json(ws.get(key), content=True)

    @app.delete("/notes/{key:path}", status_code=204)
    async def delete_note(key: str, auth: None = Depends(verify_token)) -> None:
        ws.delete_note(key)

    @app.get("/search")
    async def search(
        q: str = Query(..., description="Search query"),
        limit: int = Query(50, description="Maximum results", le=100),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, Any]]:
        """Title and content search."""
        return [
            {"key": m.note.key, "title": m.note.title, "score": m.score, "spans": m.spans}
            for m in ws.search.search(q)[:limit]
        ]

    @app.get("/suggest")
    async def suggest(
        q: str = Query(..., description="Partial link text"),
        limit: int = Query(10, le=50),
        auth: None = Depends(verify_token),
    ) -> list[dict[str, str]]:
        """Link auto-completion."""
        return [{"title": title, "url": url} for title, url in ws.suggest_links(q, limit)]

    @app.post("/open")
    async def open_link(body: LinkRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        """Follow a note link, creating the target when needed."""
        key = ws.open_link(body.href)
        return {"key": key, **view_json()}

    @app.get("/view")
    async def get_view(auth: None = Depends(verify_token)) -> dict[str, Any]:
        return view_json()

    @app.post("/view")
    async def dispatch_view(body: ViewRequest, auth: None = Depends(verify_token)) -> dict[str, Any]:
        params = None
        if body.noteId is not None:
            stack = tuple(body.stackIds) if body.stackIds is not None else None
            params = ViewParams(note_id=body.noteId, stack_ids=stack, hash=body.hash)
        try:
            ws.navigator.dispatch(ViewState(view=body.view, params=params, tag=body.tag))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        return view_json()

    @app.get("/current")
    async def current(auth: None = Depends(verify_token)) -> dict[str, Any]:
        return {"currentNoteId": ws.current_note_id}

    return app


def generate_token() -> str:
    """Generate a random bearer token."""
    return secrets.token_urlsafe(32)
