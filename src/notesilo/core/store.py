"""NoteStore: the authoritative in-memory mapping of note key to note."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from .errors import InvariantViolation, NotFound
from .model import Note, NoteKey, fold_title

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


class NoteStore:
    """Notes keyed by ``Note.key`` plus a directory index of keys.

    The store is an unchecked primitive: ``upsert`` does not enforce title
    uniqueness. Callers that accept user titles validate them first.
    """

    def __init__(self, notes: Iterable[Note] = ()) -> None:
        self.notes: dict[NoteKey, Note] = {}
        self.tree: dict[str, list[NoteKey]] = {}
        self._dir_of: dict[NoteKey, str] = {}
        for note in notes:
            self.upsert(note)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, key: NoteKey) -> Note | None:
        return self.notes.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self.notes

    def __len__(self) -> int:
        return len(self.notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(list(self.notes.values()))

    def keys(self) -> list[NoteKey]:
        return list(self.notes)

    def find_by_title(self, title: str, exclude: NoteKey | None = None) -> Note | None:
        """Case-insensitive title lookup; the first note in insertion order wins."""
        wanted = fold_title(title)
        found: Note | None = None
        for note in self.notes.values():
            if note.key == exclude or fold_title(note.title) != wanted:
                continue
            if found is None:
                found = note
            else:
                logger.error("%s", InvariantViolation(title, [found.key, note.key]))
                break
        return found

    def find_exact(self, title: str) -> Note | None:
        """Exact (case-sensitive) title lookup, as used when following links."""
        for note in self.notes.values():
            if note.title == title:
                return note
        return None

    def notes_in_dir(self, directory: str) -> list[Note]:
        return [self.notes[k] for k in self.tree.get(directory, []) if k in self.notes]

    def generate_untitled(self, excluding_key: NoteKey | None = None) -> str:
        """First free title among "Untitled", "Untitled 1", "Untitled 2", ...

        At most ``len(self)`` candidates can be taken, so the loop ends within
        ``len(self) + 1`` probes.
        """
        taken = {
            fold_title(note.title)
            for note in self.notes.values()
            if note.key != excluding_key
        }
        suffix = 0
        while True:
            candidate = f"{UNTITLED} {suffix}" if suffix > 0 else UNTITLED
            if fold_title(candidate) not in taken:
                return candidate
            suffix += 1

    def find_duplicates(self) -> list[InvariantViolation]:
        """Report groups of notes sharing a title. Nothing is repaired."""
        groups: dict[str, list[Note]] = {}
        for note in self.notes.values():
            groups.setdefault(fold_title(note.title), []).append(note)
        violations = [
            InvariantViolation(group[0].title, [n.key for n in group])
            for group in groups.values()
            if len(group) > 1
        ]
        for violation in violations:
            logger.error("%s", violation)
        return violations

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, note: Note) -> None:
        self.notes[note.key] = note
        self._track(note.parent_dir, note.key)

    def upsert_tree(self, directory: str, notes: Iterable[Note]) -> None:
        for note in notes:
            self._track(directory, note.key)

    def delete(self, key: NoteKey) -> Note | None:
        note = self.notes.pop(key, None)
        if note is not None:
            self._untrack(key)
        return note

    def update_content(self, key: NoteKey, content: str) -> Note:
        note = self.notes.get(key)
        if note is None:
            raise NotFound(key)
        updated = note.with_content(content)
        self.notes[key] = updated
        return updated

    def _track(self, directory: str, key: NoteKey) -> None:
        self._untrack(key)
        self.tree.setdefault(directory, []).append(key)
        self._dir_of[key] = directory

    def _untrack(self, key: NoteKey) -> None:
        directory = self._dir_of.pop(key, None)
        if directory is None:
            return
        keys = self.tree[directory]
        keys.remove(key)
        if not keys:
            del self.tree[directory]
