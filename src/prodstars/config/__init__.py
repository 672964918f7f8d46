"""Configuration management utilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_DIR = ".prodstars"


class ConfigManager:
    """YAML-backed loader for files under the project's ``.prodstars`` directory."""

    def __init__(self, base_path: str | Path = DEFAULT_CONFIG_DIR):
        self._base_path = Path(base_path)

    def path_for(self, name: str) -> Path:
        return self._base_path / f"{name}.yaml"

    def exists(self, name: str) -> bool:
        return self.path_for(name).is_file()

    def load(self, name: str) -> dict[str, Any]:
        """Load a YAML configuration by name without file extension."""
        path = self.path_for(name)
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ValueError(f"{path} must contain a YAML mapping")
        return loaded


__all__ = ["ConfigManager", "DEFAULT_CONFIG_DIR"]
