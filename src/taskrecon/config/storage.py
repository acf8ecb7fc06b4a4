"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env

APP_DIR_NAME: Final[str] = "taskrecon"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
TASK_SNAPSHOT_FILENAME: Final[str] = "tarkov-api-tasks.json"
OVERLAY_FILENAME: Final[str] = "tasks-overlay.json5"
FREE_TEXT_INCORRECT_FILENAME: Final[str] = "wiki-incorrect.json5"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    http_cache_filename: str = HTTP_CACHE_FILENAME
    overlay_file: Path | None = None
    free_text_incorrect_file: Path | None = None

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.http_cache_filename

    def cache_dir(self) -> Path:
        return self.resolve_data_dir() / "cache"

    def task_snapshot_path(self) -> Path:
        return self.cache_dir() / TASK_SNAPSHOT_FILENAME

    def page_snapshot_dir(self) -> Path:
        return self.cache_dir() / "wiki"

    def results_dir(self) -> Path:
        return self.resolve_data_dir() / "results"

    def overlay_path(self) -> Path:
        return self.overlay_file or (self.resolve_data_dir() / OVERLAY_FILENAME)

    def free_text_incorrect_path(self) -> Path:
        return self.free_text_incorrect_file or (
            self.resolve_data_dir() / FREE_TEXT_INCORRECT_FILENAME
        )


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = optional_env("TASKRECON_DATA_DIR")
    overlay = optional_env("TASKRECON_OVERLAY_FILE")
    incorrect = optional_env("TASKRECON_WIKI_INCORRECT_FILE")
    return StorageConfig(
        data_dir=Path(env_dir) if env_dir else _default_data_dir(),
        overlay_file=Path(overlay) if overlay else None,
        free_text_incorrect_file=Path(incorrect) if incorrect else None,
    )
