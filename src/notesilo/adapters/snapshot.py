"""JSON snapshot of the note index (titles, paths, daily flags, timestamps)."""

import json
from pathlib import Path
from typing import Any, Iterable

from ..core.model import Note
from ..core.ports import SnapshotWriter

SNAPSHOT_VERSION = 1


class JsonIndexSnapshot(SnapshotWriter):
    def __init__(self, path: Path):
        self.path = Path(path)

    def write(self, notes: Iterable[Note], tree: dict[str, list[str]]) -> None:
        data = {
            "version": SNAPSHOT_VERSION,
            "notes": [note.to_dict() for note in notes],
            "tree": {directory: list(keys) for directory, keys in tree.items()},
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic write via temp file
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.path)

    def read(self) -> dict[str, Any] | None:
        if not self.path.exists():
            return None
        return json.loads(self.path.read_text(encoding="utf-8"))
