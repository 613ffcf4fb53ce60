"""Backlink queries and title rewrites across the note store."""

from __future__ import annotations

import logging

from ..format.links import link_targets, rewrite_link_targets
from .model import NoteKey
from .store import NoteStore

logger = logging.getLogger(__name__)


def backlinks_to(store: NoteStore, title: str) -> list[NoteKey]:
    """Keys of notes whose content links to ``title``."""
    return [
        note.key
        for note in store
        if note.title != title and title in link_targets(note.content)
    ]


def relink(store: NoteStore, old_title: str, new_title: str) -> list[NoteKey]:
    """Rewrite link references from ``old_title`` to ``new_title``.

    Only notes that actually change are written back (and get a fresh
    ``updated_at``). Returns their keys.
    """
    if old_title == new_title:
        return []
    modified = []
    for note in store:
        content, count = rewrite_link_targets(note.content, old_title, new_title)
        if not count:
            continue
        store.update_content(note.key, content)
        modified.append(note.key)
        logger.debug("rewrote %d link(s) in %s", count, note.key)
    return modified


def rewrite_links(store: NoteStore, old_title: str, new_title: str) -> int:
    """Number of notes modified by :func:`relink`."""
    return len(relink(store, old_title, new_title))
