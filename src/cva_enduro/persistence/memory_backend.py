"""In-process backends for unit tests and single-process runs."""

from __future__ import annotations

import io
import threading
import time
from contextlib import contextmanager
from typing import IO, Iterator

from cva_enduro.core.cancellation import raise_if_cancelled
from cva_enduro.core.exceptions import StorageError
from cva_enduro.persistence.blob import BlobWriter


class MemoryHistoryBackend:
    """IHistoryBackend holding entries in a dict until their TTL runs out."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[str, float]] = {}
        self._lock = threading.Lock()

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._live(key)

    def put_if_absent(self, key: str, value: str, ttl: int) -> bool:
        with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = (value, time.monotonic() + ttl)
            return True

    def delete_many(self, keys: list[str]) -> int:
        with self._lock:
            return sum(self._entries.pop(key, None) is not None for key in keys)

    def _live(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            del self._entries[key]
            return None
        return value


class MemoryFileStore:
    """Dict-backed IFileStore for unit tests."""

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix
        self._files: dict[str, bytes] = {}

    @property
    def keys(self) -> list[str]:
        return sorted(self._files)

    def key_for(self, path: str) -> str:
        return f"{self._prefix}{path}"

    def open_writer(self, path: str, content_type: str = "application/octet-stream") -> BlobWriter:
        key = self.key_for(path)
        return BlobWriter(key, lambda data: self._commit(key, data))

    @contextmanager
    def open_reader(self, path: str) -> Iterator[IO[bytes]]:
        with io.BytesIO(self.read(path)) as stream:
            yield stream

    def read(self, path: str) -> bytes:
        key = self.key_for(path)
        try:
            return self._files[key]
        except KeyError as exc:
            raise StorageError(f"object not found: {key!r}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        key = self.key_for(path)
        self._commit(key, data)
        return key

    def _commit(self, key: str, data: bytes) -> None:
        raise_if_cancelled(f"write of {key!r}")
        self._files[key] = data
