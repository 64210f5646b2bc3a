"""Shared test doubles: re-export memory backends plus flaky/slow stores."""

from __future__ import annotations

import time

from cva_enduro.core.exceptions import StorageError
from cva_enduro.persistence.memory_backend import MemoryFileStore, MemoryHistoryBackend


class FlakyFileStore(MemoryFileStore):
    """MemoryFileStore whose first ``failures`` commits raise StorageError."""

    def __init__(self, failures: int, prefix: str = "") -> None:
        super().__init__(prefix=prefix)
        self.failures = failures
        self.commits = 0

    def _commit(self, key: str, data: bytes) -> None:
        self.commits += 1
        if self.commits <= self.failures:
            raise StorageError(f"simulated outage writing {key!r}")
        super()._commit(key, data)


class SlowFileStore(MemoryFileStore):
    """MemoryFileStore whose uploads take ``delay`` seconds to land."""

    def __init__(self, delay: float, prefix: str = "") -> None:
        super().__init__(prefix=prefix)
        self.delay = delay

    def _commit(self, key: str, data: bytes) -> None:
        time.sleep(self.delay)
        super()._commit(key, data)


__all__ = ["FlakyFileStore", "MemoryFileStore", "MemoryHistoryBackend", "SlowFileStore"]
