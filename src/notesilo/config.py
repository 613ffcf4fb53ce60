"""Configuration loader for silo.toml."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_NAME = "silo.toml"


@dataclass
class NotesConfig:
    """Where note files and the index snapshot live."""
    root: Path
    index: Path


@dataclass
class FilesConfig:
    """Local file access."""
    enabled: bool = True


@dataclass
class LogConfig:
    level: str = "WARNING"


@dataclass
class SiloConfig:
    """Complete notesilo configuration."""
    notes: NotesConfig
    files: FilesConfig
    log: LogConfig


def load_config(config_path: Path | None = None, notes_path: Path | None = None) -> SiloConfig:
    """
    Load configuration from silo.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/silo.toml
    3. notes_path/silo.toml

    Args:
        config_path: Explicit path to config file
        notes_path: Notes root for fallback search; also overrides [notes] root

    Returns:
        SiloConfig with resolved settings
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_NAME)
    if notes_path:
        search_paths.append(notes_path / CONFIG_NAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    notes_data = toml_data.get("notes", {})
    if notes_path is not None:
        notes_root = Path(notes_path)
    else:
        notes_root = Path(notes_data.get("root", "./notes"))
    index_path = Path(notes_data.get("index", notes_root / ".silo" / "index.json"))

    files_data = toml_data.get("files", {})
    log_data = toml_data.get("log", {})

    return SiloConfig(
        notes=NotesConfig(root=notes_root, index=index_path),
        files=FilesConfig(enabled=bool(files_data.get("enabled", True))),
        log=LogConfig(level=str(log_data.get("level", "WARNING")).upper()),
    )
