# app/storage.py
import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional, Union

from typing_extensions import Protocol

from .errors import StorageError


logger = logging.getLogger(__name__)

BOOKS_KEY = "library_books"
AUTH_USER_KEY = "library_auth_user"


class BlobStore(Protocol):
    """Minimal key-value persistence consumed by the catalog and auth layers."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryBlobStore:
    """Blob store kept in a plain dict; nothing survives the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileBlobStore:
    """Blob store backed by a single JSON object on disk.

    The file maps keys to string values. Every ``set``/``remove`` rewrites
    the whole file through a temporary sibling followed by ``os.replace``
    so a crash never leaves a half-written file behind. Access is
    serialised with a lock. A missing file reads as an empty store. A file
    that is not a JSON object (for example one truncated by hand) is moved
    to ``*.corrupt`` and also reads as empty; only real I/O failures raise
    ``StorageError``.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("rb") as f:
                raw = f.read()
        except OSError as exc:
            raise StorageError(f"Cannot read blob file {self.path}: {exc}") from exc
        try:
            data = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            self._set_aside(f"not valid JSON ({exc})")
            return {}
        if not isinstance(data, dict):
            self._set_aside("not a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _set_aside(self, reason: str) -> None:
        """Move a malformed blob file to ``*.corrupt`` so the store starts empty."""
        corrupt_path = self.path.with_name(self.path.name + ".corrupt")
        logger.warning(
            "Blob file %s is %s; moving it to %s", self.path, reason, corrupt_path
        )
        try:
            os.replace(self.path, corrupt_path)
        except OSError as exc:
            raise StorageError(f"Cannot move aside malformed blob file {self.path}: {exc}") from exc

    def _write_all(self, data: Dict[str, str], key: str) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            logger.error("Failed to write blob file %s: %s", self.path, exc)
            raise StorageError(f"Cannot write key {key!r} to {self.path}: {exc}", key=key) from exc

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data, key)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key not in data:
                return
            del data[key]
            self._write_all(data, key)
