"""Error taxonomy for note store operations."""

from __future__ import annotations


class NotesiloError(Exception):
    pass


class DuplicateTitle(NotesiloError):
    """Another note already uses this title (compared case-insensitively)."""

    def __init__(self, title: str, existing_key: str | None = None):
        self.title = title
        self.existing_key = existing_key
        super().__init__(
            f"There's already a note called {title}. Please use a different title."
        )


class NotFound(NotesiloError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Note {key} not found")


class IoFailure(NotesiloError):
    """A file access call failed; the in-memory state is kept."""

    def __init__(self, op: str, title: str, cause: BaseException | None = None):
        self.op = op
        self.title = title
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{op} failed for {title!r}{detail}")


class InvariantViolation(NotesiloError):
    """Two notes share a title outside of a rename."""

    def __init__(self, title: str, keys: list[str]):
        self.title = title
        self.keys = keys
        super().__init__(f"Duplicate title {title!r} held by {', '.join(keys)}")


class TitleLocked(NotesiloError):
    """Daily note titles are fixed to their date."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"The title of daily note {key} cannot be changed")
