"""Key-value stores backing the persisted settings."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Protocol


class KeyValueStore(Protocol):
    """Minimal get/set interface used by the settings service."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """Dictionary backed store, mainly for tests."""

    def __init__(self, data: Dict[str, str] | None = None) -> None:
        self.data: Dict[str, str] = dict(data or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class JsonFileStore:
    """Persist string values in a single JSON document on disk.

    The file is read once at construction and rewritten on every
    :meth:`set`.  A file that is not a JSON object raises ``ValueError``.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.data: Dict[str, str] = {}
        if self.path.exists():
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(loaded, dict):
                raise ValueError(f"{self.path} does not contain a JSON object")
            self.data = loaded

    def get(self, key: str) -> str | None:
        value = self.data.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = dict(self.data)
        data[key] = value
        self.path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        self.data = data
