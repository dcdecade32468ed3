"""Data storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import ENV_PREFIX

APP_DIR_NAME: Final[str] = "depmatrix"
DEFAULT_RULES_FILENAME: Final[str] = "dynamic-rules.json"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    rules_filename: str = DEFAULT_RULES_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def rules_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.rules_filename


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config() -> StorageConfig:
    env_dir = os.getenv(f"{ENV_PREFIX}DATA_DIR")
    data_dir = Path(env_dir) if env_dir else _default_data_dir()
    return StorageConfig(data_dir=data_dir)
