"""File-backed key-value storage standing in for browser local storage.

Every value is a JSON document stored under a string key in one file.
Writes go to a temporary sibling first and replace the file atomically.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from applytrack.utils.logging import get_logger

logger = get_logger("client.storage")

# Keys shared with the browser client
GUEST_APPLICATIONS_KEY = "guest-applications"
AUTH_STORAGE_KEY = "auth-storage"


class LocalStorage:
    """A tiny persistent key-value store."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable local storage file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)
