"""
Local Store Module

A key-value string store persisted to a single JSON file. It plays the
role browser local storage plays for a web client: string keys, string
values, survives between runs.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import config


logger = logging.getLogger(__name__)


class LocalStore:
    """
    File-backed key-value store.

    The whole file is re-read on every access so that separate CLI
    invocations always see each other's writes.
    """

    def __init__(self, path: Optional[Path] = None):
        """Initialize the store (uses the configured storage path if None)."""
        self.path = Path(path) if path else config.storage.storage_path
        logger.debug(f"LocalStore initialized (path: {self.path})")

    def get_item(self, key: str) -> Optional[str]:
        """Return the raw string stored under ``key``, or None."""
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Store a string value under ``key``."""
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def keys(self) -> List[str]:
        return sorted(self._read())

    def clear(self) -> None:
        self._write({})

    def get_json(self, key: str) -> Any:
        """
        Decode the JSON value stored under ``key``.

        Returns:
            The decoded value, or None if the key is missing or the
            value is not valid JSON.
        """
        raw = self.get_item(key)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring corrupt value under '{key}'")
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read storage file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} is not a JSON object, ignoring it")
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        """Atomically replace the storage file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
