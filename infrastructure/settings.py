"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JsonSettings:
        """Build settings from an in-memory mapping (no file involved)."""
        inst = cls.__new__(cls)
        inst._path = Path()
        inst._data = data
        return inst

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node

    def get_int(self, key: str, default: int) -> int:
        """Return `key` as int, falling back to `default` when not numeric."""
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def resolve_path(self, key: str, default: str | Path) -> Path:
        """Return `key` as a path; relative paths resolve against the settings file."""
        raw = Path(str(self.get(key, default))).expanduser()
        if raw.is_absolute():
            return raw
        return (self._path.parent / raw).resolve()
