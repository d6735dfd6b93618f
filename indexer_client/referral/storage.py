"""Key-value storage backends for the referral record.

The storage medium belongs to the host application. Anything with
get/set/delete of string values works; two backends ship here.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ReferralStorage(Protocol):
    """Persistent string key-value storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryReferralStorage:
    """Process-local storage. Contents are lost on exit."""

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileReferralStorage:
    """Device-wide storage backed by a JSON object file.

    Writes go through a temporary file and ``os.replace`` so a crash never
    leaves a half-written file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)

    def delete(self, key: str) -> None:
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable referral storage at %s, treating as empty: %s", self._path, exc)
            return {}
        return raw if isinstance(raw, dict) else {}

    def _write(self, values: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=".referral-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(values, fh)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
