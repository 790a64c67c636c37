"""Durable key-value stores for the session token."""

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from hookchat.exceptions import CorruptStateError, StorageError

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenStore(Protocol):
    """Protocol for client-side durable storage.

    Implementations raise StorageError when the underlying medium is
    unavailable; callers decide how to degrade.
    """

    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    def delete(self, key: str) -> bool:
        """Remove key. Returns True if something was removed."""
        ...


class FileTokenStore:
    """Store values in a single JSON object on disk.

    Layout:
    {state_file}
      {"hookchat.sessionId": "session_..."}
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text()
        except OSError as e:
            raise StorageError(f"Cannot read {self._path}", cause=e) from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStateError(f"Corrupt state file {self._path}", cause=e) from e
        if not isinstance(data, dict):
            raise CorruptStateError(f"Corrupt state file {self._path}: expected an object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        # write-then-rename so an interrupted write never leaves half a file
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, indent=2))
            tmp_path.replace(self._path)
        except OSError as e:
            raise StorageError(f"Cannot write {self._path}", cause=e) from e

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except CorruptStateError as e:
            logger.warning("Overwriting unreadable state: %s", e)
            data = {}
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> bool:
        """Remove key; a corrupt state file is removed as a whole."""
        try:
            data = self._read()
        except CorruptStateError as e:
            logger.warning("Removing unreadable state: %s", e)
            try:
                self._path.unlink()
            except OSError as err:
                raise StorageError(f"Cannot remove {self._path}", cause=err) from err
            return True
        if key not in data:
            return False
        del data[key]
        self._write(data)
        return True


class MemoryTokenStore:
    """In-memory store for tests and storage-less environments."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def clear(self) -> None:
        self._data.clear()
