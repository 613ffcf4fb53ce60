"""View navigation: a pure reducer plus the navigator that applies its effects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable

from .model import VIEW_KINDS, NoteKey, ViewAction, ViewParams, ViewState

logger = logging.getLogger(__name__)

INITIAL_STATE = ViewState(view="default")


@dataclass(frozen=True)
class SetCurrentNote:
    """Effect: point the current-note signal at ``note_id`` (None clears it)."""

    note_id: NoteKey | None


def reduce_view(state: ViewState, action: ViewAction) -> tuple[ViewState, SetCurrentNote]:
    """Next view state for ``action`` plus the current-note effect to apply.

    Every action replaces the whole state; only ``md`` carries params and only
    ``tag`` carries a tag.
    """
    view = action.view
    if view not in VIEW_KINDS:
        raise ValueError(f"Unknown view: {view!r}")

    if view == "md":
        if action.params is None or not action.params.note_id:
            raise ValueError("md view requires params.note_id")
        return ViewState(view="md", params=action.params), SetCurrentNote(action.params.note_id)
    if view == "tag":
        if not action.tag:
            raise ValueError("tag view requires a tag")
        return ViewState(view="tag", tag=action.tag), SetCurrentNote(None)
    return ViewState(view=view), SetCurrentNote(None)


class CurrentNote:
    """Process-wide readable signal holding the note id of the active md view."""

    def __init__(self) -> None:
        self.value: NoteKey | None = None
        self._listeners: list[Callable[[NoteKey | None], None]] = []

    def set(self, value: NoteKey | None) -> None:
        if value == self.value:
            return
        self.value = value
        for listener in list(self._listeners):
            listener(value)

    def subscribe(self, listener: Callable[[NoteKey | None], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)


class Navigator:
    """Holds the view state for a session and applies reducer effects."""

    def __init__(self, current: CurrentNote | None = None) -> None:
        self.state = INITIAL_STATE
        self.current = current or CurrentNote()

    @property
    def current_note_id(self) -> NoteKey | None:
        return self.current.value

    def dispatch(self, action: ViewAction) -> ViewState:
        self.state, effect = reduce_view(self.state, action)
        self.current.set(effect.note_id)
        logger.debug("view -> %s", self.state.view)
        return self.state

    def open_note(self, key: NoteKey, hash: str | None = None) -> ViewState:
        return self.dispatch(ViewState(view="md", params=ViewParams(note_id=key, hash=hash)))

    def redirect(self, old_key: NoteKey, new_key: NoteKey) -> bool:
        """Re-point an md view showing ``old_key`` at ``new_key``."""
        params = self.state.params
        if self.state.view != "md" or params is None:
            return False
        stack = params.stack_ids
        if stack is not None:
            stack = tuple(new_key if k == old_key else k for k in stack)
        if params.note_id != old_key and stack == params.stack_ids:
            return False
        note_id = new_key if params.note_id == old_key else params.note_id
        self.dispatch(ViewState(view="md", params=replace(params, note_id=note_id, stack_ids=stack)))
        return True

    def leave(self, key: NoteKey) -> bool:
        """Fall back to the default view if ``key`` is the note on display."""
        if self.state.view == "md" and self.state.params and self.state.params.note_id == key:
            self.dispatch(ViewState(view="default"))
            return True
        return False
