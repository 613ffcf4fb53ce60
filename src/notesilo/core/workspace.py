"""Workspace: the session-level entry points used by the editor and the UI."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from urllib.parse import unquote

from ..format.links import SCHEME_RE, encode_uri
from .backlinks import backlinks_to
from .errors import IoFailure, NotFound
from .handles import FileHandleRegistry
from .model import NOTE_SUFFIX, Note, NoteKey
from .navigation import Navigator
from .ports import FileAccess, Search, SnapshotWriter
from .rename import RenameOrchestrator, RenameResult
from .store import NoteStore

logger = logging.getLogger(__name__)


class Workspace:
    """One note store with its files, navigation and index snapshot.

    Every mutating method runs inside :meth:`batch`; the index snapshot is
    written once when the outermost batch closes.
    """

    def __init__(
        self,
        store: NoteStore | None = None,
        access: FileAccess | None = None,
        snapshot: SnapshotWriter | None = None,
        search: Search | None = None,
        navigator: Navigator | None = None,
        notes_dir: str = "",
    ) -> None:
        self.store = store if store is not None else NoteStore()
        self.notifications: list[str] = []
        self.registry = FileHandleRegistry(access, on_io_failure=self._notify)
        self.navigator = navigator or Navigator()
        self.renamer = RenameOrchestrator(self.store, self.registry, self.navigator)
        self.snapshot = snapshot
        self.search = search
        self.notes_dir = notes_dir
        self._depth = 0
        self._dirty = False

    @property
    def current_note_id(self) -> NoteKey | None:
        return self.navigator.current_note_id

    # ------------------------------------------------------------------
    # Batching / persistence
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Iterator["Workspace"]:
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1
            if self._depth == 0 and self._dirty:
                self._dirty = False
                self.save_index()

    def save_index(self) -> bool:
        if self.snapshot is None:
            return False
        try:
            self.snapshot.write(self.store, self.store.tree)
        except OSError as e:
            self._notify(IoFailure("snapshot", "index", e))
            return False
        logger.debug("index snapshot written (%d notes)", len(self.store))
        return True

    def _notify(self, failure: IoFailure) -> None:
        self.notifications.append(str(failure))

    # ------------------------------------------------------------------
    # Notes
    # ------------------------------------------------------------------

    def create_note(self, title: str = "", parent_dir: str | None = None, content: str = "") -> Note:
        """Find or create the note called ``title``."""
        title = title.strip() or self.store.generate_untitled()
        existing = self.store.find_by_title(title)
        if existing is not None:
            return existing
        note = Note.new(title, self.notes_dir if parent_dir is None else parent_dir, content)
        with self.batch():
            self.store.upsert(note)
            self.registry.write(note.title, content)
            self._dirty = True
        logger.info("created %s", note.key)
        return note

    def update_content(self, key: NoteKey, text: str) -> bool:
        """Apply an editor content change and write it through to the file."""
        if self.renamer.in_flight(key):
            logger.warning("content update for %s dropped: rename in progress", key)
            return False
        with self.batch():
            note = self.store.update_content(key, text)
            self.registry.write(note.title, note.content)
            self._dirty = True
        return True

    def rename(self, key: NoteKey, title: str) -> RenameResult:
        with self.batch():
            result = self.renamer.rename(key, title)
            if result.ok and result.new_key != key:
                self._dirty = True
        return result

    def delete_note(self, key: NoteKey) -> bool:
        with self.batch():
            note = self.store.delete(key)
            if note is None:
                return False
            self.registry.delete(note.title)
            self.navigator.leave(key)
            self._dirty = True
        logger.info("deleted %s", key)
        return True

    def get(self, key: NoteKey) -> Note:
        note = self.store.get(key)
        if note is None:
            raise NotFound(key)
        return note

    def backlinks(self, key: NoteKey) -> list[Note]:
        note = self.get(key)
        return [self.store.notes[k] for k in backlinks_to(self.store, note.title)]

    # ------------------------------------------------------------------
    # Editor callbacks
    # ------------------------------------------------------------------

    def open_link(self, href: str) -> NoteKey | None:
        """Follow an editor link; creates the target note when it is missing.

        External URLs are not handled here and return None.
        """
        href = href.strip()
        if not href or SCHEME_RE.match(href):
            return None
        target, _, fragment = href.partition("#")
        title = unquote(target).strip()
        if title.endswith(NOTE_SUFFIX):
            title = title[: -len(NOTE_SUFFIX)]
        if not title:
            return None

        note = self.store.find_exact(title)
        if note is None:
            note = self.create_note(title)
        else:
            self.refresh_note(note.key)
        self.navigator.open_note(note.key, hash=fragment or None)
        return note.key

    def suggest_links(self, query: str, limit: int = 10) -> list[tuple[str, str]]:
        """Link auto-completion: ``(title, url)`` for the best matching notes."""
        if self.search is None:
            raise RuntimeError("No search capability configured")
        out = []
        for match in self.search.search(query)[:limit]:
            title = match.note.title.strip()
            out.append((title, encode_uri(title)))
        return out

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def refresh_note(self, key: NoteKey) -> Note:
        """Reload a note's content from its file, if the file can be read."""
        note = self.get(key)
        content = self.registry.read(note.title)
        if content is None or content == note.content:
            return note
        with self.batch():
            note = self.store.update_content(key, content)
            self._dirty = True
        return note

    def load(self) -> int:
        """Populate the store from the note files the capability can list."""
        if not self.registry.supported:
            return 0
        try:
            titles = list(self.registry.access.list_titles())  # type: ignore[union-attr]
        except OSError as e:
            self._notify(IoFailure("list", "notes", e))
            return 0

        snapshot = self._read_snapshot()
        known = {entry["key"]: entry for entry in snapshot.get("notes", []) if "key" in entry}
        loaded = 0
        with self.batch():
            for title in sorted(titles):
                content = self.registry.read(title)
                if content is None:
                    continue
                note = Note.new(title, self.notes_dir, content)
                entry = known.get(note.key)
                if entry:
                    note.path = entry.get("path") or note.path
                    note.created_at = _parse_time(entry.get("created_at")) or note.created_at
                    note.updated_at = _parse_time(entry.get("updated_at")) or note.updated_at
                self.store.upsert(note)
                loaded += 1
            # restore directory order from the last session
            for directory, keys in snapshot.get("tree", {}).items():
                self.store.upsert_tree(directory, [self.store.notes[k] for k in keys if k in self.store])
            self._dirty = loaded > 0
        self.store.find_duplicates()
        logger.info("loaded %d notes", loaded)
        return loaded

    def _read_snapshot(self) -> dict:
        if self.snapshot is None:
            return {}
        try:
            data = self.snapshot.read()
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable index snapshot: %s", e)
            return {}
        return data or {}


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
