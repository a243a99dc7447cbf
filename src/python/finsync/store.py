"""Persistence store implementations: JSON file and in-memory."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
import threading

from finsync.persistence import PersistenceStore

logger = logging.getLogger(__name__)


class MemoryStore(PersistenceStore):
    """Dict-backed store; contents last as long as the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore(PersistenceStore):
    """Store that persists values to a JSON object on disk.

    Every write rewrites the whole file through a temporary sibling and an
    atomic rename, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: dict[str, str] = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable store %s: %s", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("Ignoring store %s: top level is not an object", self.path)
            return {}
        return {str(key): str(value) for key, value in payload.items() if value is not None}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with temp_path.open("w", encoding="utf-8") as handle:
            json.dump(self._data, handle)
        os.replace(temp_path, self.path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._save()

    def delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            del self._data[key]
            self._save()

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
            if self.path.exists():
                self.path.unlink()
