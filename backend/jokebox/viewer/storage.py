"""File-backed key/value store with browser ``localStorage`` semantics."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    String key/value store persisted as a single JSON object on disk.

    Reads never fail: a missing, unreadable or malformed file behaves like
    an empty store. Writes replace the file atomically via rename.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Could not read local storage %s: %s", self._path, exc)
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt local storage file %s", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring local storage file %s with unexpected shape", self._path)
            return {}
        return {str(key): str(value) for key, value in data.items()}

    def _write_all(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def set_items(self, items: dict[str, str]) -> None:
        """Write several keys in one file replacement."""
        current = self._read_all()
        current.update(items)
        self._write_all(current)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    def clear(self) -> None:
        self._write_all({})


__all__ = ["LocalStorage"]
