"""Runtime wiring helper for CLI and API applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.fs_access import FsFileAccess
from .adapters.search import SubstringSearch
from .adapters.snapshot import JsonIndexSnapshot
from .config import SiloConfig, load_config
from .core.store import NoteStore
from .core.workspace import Workspace


@dataclass
class Runtime:
    """Container for all wired components."""
    workspace: Workspace
    config: SiloConfig


def build_runtime(
    notes_path: Path | None = None,
    config_path: Path | None = None,
    load: bool = True,
) -> Runtime:
    """Build and wire all components for a notes directory."""
    config = load_config(config_path=config_path, notes_path=notes_path)

    store = NoteStore()
    access = FsFileAccess(config.notes.root) if config.files.enabled else None
    workspace = Workspace(
        store=store,
        access=access,
        snapshot=JsonIndexSnapshot(config.notes.index),
        search=SubstringSearch(store),
    )
    if load:
        workspace.load()

    return Runtime(workspace=workspace, config=config)
