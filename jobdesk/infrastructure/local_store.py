"""Local key-value persistence for the session and last-known snapshot."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)


def default_data_root() -> Path:
    env_root = os.getenv("JOBDESK_DATA_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2] / "data"


class KeyValueStore(Protocol):
    """Persistence contract mirroring browser local storage."""

    def read(self, key: str) -> Any | None: ...

    def write(self, key: str, value: Any) -> None: ...

    def remove(self, key: str) -> None: ...


class JsonFileStore:
    """One JSON document per key under a root directory."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root or default_data_root()

    def _path(self, key: str) -> Path:
        return self._root / f"{Path(key).name}.json"

    def read(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable local state %s", path)
            return None

    def write(self, key: str, value: Any) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class InMemoryKeyValueStore:
    """Simple in-memory store for tests."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def read(self, key: str) -> Any | None:
        raw = self._items.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def write(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value, ensure_ascii=False)

    def write_raw(self, key: str, raw: str) -> None:
        self._items[key] = raw

    def remove(self, key: str) -> None:
        self._items.pop(key, None)
