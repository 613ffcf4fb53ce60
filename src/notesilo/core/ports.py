from __future__ import annotations

from typing import Any, Iterable, Protocol, Sequence

from .model import Note

Handle = Any


class FileAccess(Protocol):
    """
    Local file capability. Handles are opaque tokens, one per note title.
    Deleting a handle that does not exist is not an error.
    """

    def is_supported(self) -> bool:
        pass

    def get_or_create_handle(self, title: str) -> Handle | None:
        pass

    def write(self, handle: Handle, content: str) -> None:
        pass

    def read(self, handle: Handle) -> str:
        pass

    def delete_handle(self, title: str) -> None:
        pass

    def same_handle(self, a: Handle, b: Handle) -> bool:
        """True when both handles name the same underlying file."""
        pass

    def list_titles(self) -> Iterable[str]:
        pass


class SearchMatch(Protocol):
    note: Note
    spans: Sequence[tuple[int, int]]


class Search(Protocol):
    """
    Ranked lookup over the store; read-only.
    """

    def search(self, query: str) -> Sequence[SearchMatch]:
        pass


class SnapshotWriter(Protocol):
    """
    Persists the aggregate note index (titles, paths, daily flags).
    """

    def write(self, notes: Iterable[Note], tree: dict[str, list[str]]) -> None:
        pass

    def read(self) -> dict[str, Any] | None:
        pass
