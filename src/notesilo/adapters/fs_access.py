import errno
import os
from pathlib import Path
from typing import Iterable

from ..core.model import NOTE_SUFFIX
from ..core.ports import FileAccess


class FsFileAccess(FileAccess):
    """
    One directory, one ``<title>.md`` file per note. Handles are file paths.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def _path(self, title: str) -> Path:
        if not title or title in (".", "..") or "/" in title or "\\" in title or "\0" in title:
            raise OSError(errno.EINVAL, f"Invalid note file name: {title!r}")
        return self.root / f"{title}{NOTE_SUFFIX}"

    def is_supported(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(self.root, os.W_OK)

    def get_or_create_handle(self, title: str) -> Path:
        p = self._path(title)
        if not p.exists():
            self.root.mkdir(parents=True, exist_ok=True)
            p.touch()
        return p

    def write(self, handle: Path, content: str) -> None:
        # Atomic write via temp file
        tmp = handle.with_name(f".{handle.name}.tmp")
        tmp.write_text(content, encoding="utf-8")
        tmp.replace(handle)

    def read(self, handle: Path) -> str:
        return handle.read_text(encoding="utf-8")

    def delete_handle(self, title: str) -> None:
        p = self._path(title)
        if p.exists():
            p.unlink()

    def same_handle(self, a: Path, b: Path) -> bool:
        if a == b:
            return True
        try:
            return os.path.samefile(a, b)
        except OSError:
            return False

    def list_titles(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return [
            p.name[: -len(NOTE_SUFFIX)]
            for p in self.root.glob(f"*{NOTE_SUFFIX}")
            if p.is_file() and not p.name.startswith(".")
        ]
