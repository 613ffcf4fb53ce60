"""FileHandleRegistry: title -> local file handle bookkeeping."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from .errors import IoFailure
from .ports import FileAccess, Handle

logger = logging.getLogger(__name__)


class FileHandleRegistry:
    """Owns every file handle; the note store only ever asks by title.

    Failures from the file access capability never escape: they are logged,
    passed to ``on_io_failure`` and reported through return values, so the
    logical operation that triggered them can carry on in memory.
    """

    def __init__(
        self,
        access: FileAccess | None = None,
        on_io_failure: Callable[[IoFailure], None] | None = None,
    ) -> None:
        self.access = access
        self.on_io_failure = on_io_failure
        self.handles: dict[str, Handle] = {}

    @property
    def supported(self) -> bool:
        if self.access is None:
            return False
        try:
            return bool(self.access.is_supported())
        except OSError:
            return False

    def get(self, title: str) -> Handle | None:
        return self.handles.get(title)

    def get_or_create(self, title: str) -> Handle | None:
        try:
            return self._get_or_create(title)
        except IoFailure as e:
            self._report(e)
            return None

    def write(self, title: str, content: str) -> bool:
        """Write ``content`` to the title's file, creating the handle lazily."""
        try:
            handle = self._get_or_create(title)
            if handle is None:
                return False
            self._write(handle, title, content)
        except IoFailure as e:
            self._report(e)
            return False
        return True

    def read(self, title: str) -> str | None:
        if not self.supported:
            return None
        try:
            handle = self._get_or_create(title)
            if handle is None:
                return None
            return self.access.read(handle)  # type: ignore[union-attr]
        except IoFailure as e:
            self._report(e)
            return None
        except OSError as e:
            self._report(IoFailure("read", title, e))
            return None

    def delete(self, title: str) -> bool:
        try:
            self._delete(title)
        except IoFailure as e:
            self._report(e)
            return False
        return True

    def sync(self, items: Iterable[tuple[str, str]]) -> list[IoFailure]:
        """Write several ``(title, content)`` pairs; returns what failed."""
        failures = []
        for title, content in items:
            try:
                handle = self._get_or_create(title)
                if handle is not None:
                    self._write(handle, title, content)
            except IoFailure as e:
                self._report(e)
                failures.append(e)
        return failures

    def swap(self, old_title: str, new_title: str, content: str) -> list[IoFailure]:
        """Move a note's file from ``old_title`` to ``new_title``.

        The new handle is acquired and written before the old one is released.
        If the new file could not be written the old file is left on disk and
        only its registry entry is dropped.
        """
        failures: list[IoFailure] = []
        new_handle = None
        written = False
        try:
            new_handle = self._get_or_create(new_title)
            if new_handle is not None:
                self._write(new_handle, new_title, content)
                written = True
        except IoFailure as e:
            failures.append(e)

        if old_title != new_title:
            old_handle = self.handles.get(old_title)
            if not written:
                self.handles.pop(old_title, None)
                logger.warning("kept %r on disk: content was not written to %r", old_title, new_title)
            elif old_handle is not None and self._same(old_handle, new_handle):
                # case-only rename on a case-insensitive file system
                self.handles.pop(old_title, None)
            else:
                try:
                    self._delete(old_title)
                except IoFailure as e:
                    failures.append(e)

        for failure in failures:
            self._report(failure)
        return failures

    # ------------------------------------------------------------------

    def _get_or_create(self, title: str) -> Handle | None:
        if not self.supported:
            return None
        handle = self.handles.get(title)
        if handle is not None:
            return handle
        try:
            handle = self.access.get_or_create_handle(title)  # type: ignore[union-attr]
        except OSError as e:
            raise IoFailure("open", title, e) from e
        if handle is not None:
            self.handles[title] = handle
        return handle

    def _write(self, handle: Handle, title: str, content: str) -> None:
        try:
            self.access.write(handle, content)  # type: ignore[union-attr]
        except OSError as e:
            raise IoFailure("write", title, e) from e

    def _delete(self, title: str) -> None:
        self.handles.pop(title, None)
        if not self.supported:
            return
        try:
            self.access.delete_handle(title)  # type: ignore[union-attr]
        except OSError as e:
            raise IoFailure("delete", title, e) from e

    def _same(self, a: Handle, b: Handle) -> bool:
        try:
            return bool(self.access.same_handle(a, b))  # type: ignore[union-attr]
        except OSError:
            return False

    def _report(self, failure: IoFailure) -> None:
        logger.warning("%s", failure)
        if self.on_io_failure is not None:
            self.on_io_failure(failure)
