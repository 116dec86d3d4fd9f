from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Listener = Callable[[str, Any], None]


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        ...

    def delete(self, key: str) -> None:
        ...

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        ...


class MemoryKeyValueStore:
    """Process-local store. Values are deep-copied on the way in and out."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial or {})
        self._listeners: list[Listener] = []
        self._lock = Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
            self._persist()
        self._notify(key, value)

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> Any:
        """Read-modify-write of one key under the store lock. Returns the new value."""
        with self._lock:
            current = copy.deepcopy(self._data.get(key, default))
            value = fn(current)
            self._data[key] = copy.deepcopy(value)
            self._persist()
        self._notify(key, value)
        return copy.deepcopy(value)

    def delete(self, key: str) -> None:
        with self._lock:
            existed = key in self._data
            if existed:
                del self._data[key]
                self._persist()
        if existed:
            self._notify(key, None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _persist(self) -> None:
        return None

    def _notify(self, key: str, value: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(key, copy.deepcopy(value))
            except Exception:
                logger.exception("kv_store listener failed key=%s", key)


class JsonFileKeyValueStore(MemoryKeyValueStore):
    """Durable store: loaded once at startup, rewritten on every change."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        super().__init__(self._load(self._path))

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("kv_store could not read %s; starting empty", path)
            return {}
        return data if isinstance(data, dict) else {}

    def _persist(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self._path.parent), prefix=".lokal_state_")
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(self._data, handle, ensure_ascii=False)
        os.replace(tmp_name, self._path)
