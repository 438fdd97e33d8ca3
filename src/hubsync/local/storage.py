"""Local persistence boundary: keyed string slots."""

from __future__ import annotations

import os
import tempfile
from typing import Optional, Protocol

from hubsync.errors import StorageError


class KeyValueStore(Protocol):
    """Simple key/value string storage (one slot per key)."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryKeyValueStore:
    """In-process storage; contents vanish with the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileKeyValueStore:
    """
    One UTF-8 file per key under directory.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a crash never leaves a half-written slot.
    """

    def __init__(self, directory: str) -> None:
        if not directory or not isinstance(directory, str):
            raise ValueError("directory must be a non-empty string")
        self._directory = directory

    @property
    def directory(self) -> str:
        return self._directory

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as exc:
            raise StorageError("Failed to read slot", details={"key": key}, cause=exc) from exc

    def set(self, key: str, value: str) -> None:
        os.makedirs(self._directory, exist_ok=True)
        path = self._path(key)
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError("Failed to write slot", details={"key": key}, cause=exc) from exc

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            return
        except OSError as exc:
            raise StorageError("Failed to delete slot", details={"key": key}, cause=exc) from exc

    def _path(self, key: str) -> str:
        if not key or os.sep in key or (os.altsep and os.altsep in key) or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self._directory, f"{key}.json")
