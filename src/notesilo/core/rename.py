"""Rename transaction: title check, backlink rewrite, file swap, key swap, redirect."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from .backlinks import relink
from .errors import DuplicateTitle, IoFailure, NotesiloError, NotFound, TitleLocked
from .handles import FileHandleRegistry
from .model import NoteKey, note_key
from .navigation import Navigator
from .store import NoteStore

logger = logging.getLogger(__name__)

SUCCESS = "success"
PARTIAL_IO_FAILURE = "partial_io_failure"
DUPLICATE_TITLE = "duplicate_title"
NOT_FOUND = "not_found"
TITLE_LOCKED = "title_locked"


@dataclass
class RenameResult:
    status: str
    key: NoteKey
    new_key: NoteKey | None = None
    error: NotesiloError | None = None
    failures: list[IoFailure] = field(default_factory=list)
    relinked: list[NoteKey] = field(default_factory=list)

    @property
    def links_rewritten(self) -> int:
        """Number of other notes whose links were rewritten."""
        return len(self.relinked)

    @property
    def ok(self) -> bool:
        """The note now lives under ``new_key`` (possibly with file errors)."""
        return self.status in (SUCCESS, PARTIAL_IO_FAILURE)

    @property
    def message(self) -> str:
        if self.error is not None:
            return str(self.error)
        if self.failures:
            return "; ".join(str(f) for f in self.failures)
        return ""


RenameObserver = Callable[[NoteKey, RenameResult], None]


class RenameOrchestrator:
    """Runs a rename as one ordered transaction over store, files and view.

    Title conflicts abort before anything changes. File errors after that
    point are reported in the result but never undo the in-memory rename.
    """

    def __init__(
        self,
        store: NoteStore,
        registry: FileHandleRegistry,
        navigator: Navigator | None = None,
    ) -> None:
        self.store = store
        self.registry = registry
        self.navigator = navigator
        self._in_flight: set[NoteKey] = set()
        self._observers: list[RenameObserver] = []

    def subscribe(self, observer: RenameObserver) -> Callable[[], None]:
        self._observers.append(observer)
        return lambda: self._observers.remove(observer)

    def in_flight(self, key: NoteKey) -> bool:
        return key in self._in_flight

    def rename(self, key: NoteKey, proposed_title: str) -> RenameResult:
        result = self._rename(key, proposed_title)
        if result.ok:
            logger.info("renamed %s -> %s (%s)", key, result.new_key, result.status)
        else:
            logger.info("rename of %s refused: %s", key, result.message)
        for observer in list(self._observers):
            observer(key, result)
        return result

    def _rename(self, key: NoteKey, proposed_title: str) -> RenameResult:
        note = self.store.get(key)
        if note is None:
            return RenameResult(NOT_FOUND, key, error=NotFound(key))

        new_title = (proposed_title or "").strip() or self.store.generate_untitled(key)
        old_title = note.title
        if new_title == old_title:
            return RenameResult(SUCCESS, key, new_key=key)
        if note.is_daily:
            return RenameResult(TITLE_LOCKED, key, error=TitleLocked(key))

        clash = self.store.find_by_title(new_title, exclude=key)
        new_key = note_key(new_title)
        if clash is None and new_key != key and new_key in self.store:
            clash = self.store.get(new_key)
        if clash is not None:
            return RenameResult(
                DUPLICATE_TITLE, key, error=DuplicateTitle(new_title, clash.key)
            )

        self._in_flight.add(key)
        try:
            relinked = [k for k in relink(self.store, old_title, new_title) if k != key]

            failures: list[IoFailure] = []
            if self.registry.supported:
                content = self.store.get(key).content  # type: ignore[union-attr]
                failures = self.registry.swap(old_title, new_title, content)
                failures += self.registry.sync(
                    (self.store.notes[k].title, self.store.notes[k].content) for k in relinked
                )

            renamed = self.store.get(key).renamed(new_title)  # type: ignore[union-attr]
            self.store.upsert(renamed)
            if renamed.key != key:
                self.store.delete(key)

            if self.navigator is not None:
                self.navigator.redirect(key, renamed.key)
        finally:
            self._in_flight.discard(key)

        return RenameResult(
            PARTIAL_IO_FAILURE if failures else SUCCESS,
            key,
            new_key=renamed.key,
            failures=failures,
            relinked=relinked,
        )
