"""Scoped blob writer shared by the file store backends."""

from __future__ import annotations

import io
from types import TracebackType
from typing import Callable

from cva_enduro.core.cancellation import is_cancelled
from cva_enduro.core.exceptions import AttemptCancelledError, StorageError


class BlobWriter:
    """Buffering writer whose content becomes visible only on close().

    Used as a context manager: a clean exit commits the buffered bytes in
    one call, an exception discards them so no partial object is stored.
    Closing inside an abandoned attempt discards the content as well.
    """

    def __init__(self, key: str, commit: Callable[[bytes], None]) -> None:
        self.key = key
        self._commit = commit
        self._buffer = io.BytesIO()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise StorageError(f"write to closed writer for {self.key!r}")
        return self._buffer.write(data)

    def close(self) -> None:
        """Finalize the object. Calling it again is a no-op."""
        if self._closed:
            return
        if is_cancelled():
            self.abort()
            raise AttemptCancelledError(f"write of {self.key!r} discarded: attempt was abandoned")
        self._closed = True
        data = self._buffer.getvalue()
        self._buffer.close()
        self._commit(data)

    def abort(self) -> None:
        """Discard buffered content without storing anything."""
        if self._closed:
            return
        self._closed = True
        self._buffer.close()

    def __enter__(self) -> BlobWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()
