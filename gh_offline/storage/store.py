"""Namespaced JSON key-value store with explicit save-to-disk."""

import copy
import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ..errors import StorageError


class JsonStore:
    """A single JSON file holding one namespace of keys.

    Values are kept in an in-memory mirror; ``save()`` flushes the whole
    namespace atomically (temp file + replace). ``put()`` and ``remove()``
    set-and-flush in one step and roll the mirror back if the flush fails,
    so the mirror is never ahead of disk.

    Example:
        >>> store = JsonStore(Path("data/app-store.json"))
        >>> store.put("repositories", [])
        >>> store.get("repositories")
        []
    """

    def __init__(self, file_path: Path):
        self.file_path = Path(file_path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.file_path.exists():
            return {}

        try:
            with open(self.file_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self.file_path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"{self.file_path} does not contain a JSON object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """Return a deep copy of the stored value, or ``default``."""
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)

    def save(self) -> None:
        """Flush the namespace to disk atomically."""
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.file_path.parent,
                prefix=f".{self.file_path.stem}_",
                suffix=".json.tmp",
            )
        except OSError as e:
            raise StorageError(f"Failed to save {self.file_path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.file_path)
        except (OSError, TypeError, ValueError) as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Failed to save {self.file_path}: {e}") from e

    def put(self, key: str, value: Any) -> None:
        """Set ``key`` and flush; on failure the previous value is restored."""
        missing = key not in self._data
        previous = self._data.get(key)
        self.set(key, value)
        try:
            self.save()
        except StorageError:
            if missing:
                self._data.pop(key, None)
            else:
                self._data[key] = previous
            raise

    def remove(self, key: str) -> None:
        """Delete ``key`` and flush; on failure the previous value is restored."""
        if key not in self._data:
            return
        previous = self._data.pop(key)
        try:
            self.save()
        except StorageError:
            self._data[key] = previous
            raise
