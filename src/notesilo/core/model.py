from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Literal

NoteKey = str

NOTE_SUFFIX = ".md"
DAILY_TITLE_RE = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
EMPTY_CONTENT = " "  # shown in place of an empty body


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def note_key(title: str) -> NoteKey:
    """Derive the store key (and file name) for a title."""
    return f"{title}{NOTE_SUFFIX}"


def title_from_key(key: NoteKey) -> str:
    name = posixpath.basename(key)
    if name.endswith(NOTE_SUFFIX):
        return name[: -len(NOTE_SUFFIX)]
    return name


def fold_title(title: str) -> str:
    """Comparison form used for title uniqueness."""
    return title.strip().casefold()


def titles_equal(a: str | None, b: str | None) -> bool:
    if a is None or b is None:
        return False
    return fold_title(a) == fold_title(b)


def is_daily_title(title: str) -> bool:
    return bool(DAILY_TITLE_RE.match(title))


@dataclass
class Note:
    """A single markdown document keyed by its title."""

    key: NoteKey
    title: str
    content: str = ""
    path: str = ""
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.content is None:
            self.content = ""
        if not self.path:
            self.path = self.key

    @classmethod
    def new(cls, title: str, parent_dir: str = "", content: str = "") -> "Note":
        key = note_key(title)
        path = posixpath.join(parent_dir, key) if parent_dir else key
        return cls(key=key, title=title, content=content, path=path)

    @property
    def is_daily(self) -> bool:
        return is_daily_title(self.title)

    @property
    def parent_dir(self) -> str:
        return posixpath.dirname(self.path)

    @property
    def display_content(self) -> str:
        return self.content or EMPTY_CONTENT

    def with_content(self, content: str) -> "Note":
        return replace(self, content=content if content is not None else "", updated_at=utcnow())

    def renamed(self, title: str) -> "Note":
        """Copy of this note under ``title``; key and path follow the title."""
        key = note_key(title)
        parent = self.parent_dir
        path = posixpath.join(parent, key) if parent else key
        return replace(self, key=key, title=title, path=path, updated_at=utcnow())

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "path": self.path,
            "is_daily": self.is_daily,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


ViewKind = Literal["default", "chronicle", "task", "graph", "journal", "md", "tag"]
VIEW_KINDS: tuple[str, ...] = ("default", "chronicle", "task", "graph", "journal", "md", "tag")


@dataclass(frozen=True)
class ViewParams:
    note_id: NoteKey
    stack_ids: tuple[NoteKey, ...] | None = None
    hash: str | None = None


@dataclass(frozen=True)
class ViewState:
    view: str = "default"
    params: ViewParams | None = None
    tag: str | None = None

    def to_dict(self) -> dict:
        out: dict = {"view": self.view}
        if self.params is not None:
            params: dict = {"noteId": self.params.note_id}
            if self.params.stack_ids is not None:
                params["stackIds"] = list(self.params.stack_ids)
            if self.params.hash is not None:
                params["hash"] = self.params.hash
            out["params"] = params
        if self.tag is not None:
            out["tag"] = self.tag
        return out


# Actions carry the same shape as the state they produce.
ViewAction = ViewState
