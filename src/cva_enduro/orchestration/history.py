"""Recorded activity results of in-flight workflow runs.

An entry is keyed by workflow id and call sequence and carries a fingerprint
of the activity input it was produced for. Entries exist while a run is in
flight: the engine clears them once the run returns or raises, so only a run
interrupted mid-way (a crashed worker) leaves entries behind, and those
expire after the TTL.
"""

from __future__ import annotations

import hashlib
import json
from typing import Iterable

from cva_enduro.core.exceptions import HistoryMismatchError
from cva_enduro.persistence.protocols import IHistoryBackend


class ActivityHistory:
    """Lets a resumed workflow run reuse the results its earlier attempt recorded."""

    DEFAULT_TTL = 7 * 24 * 3600  # 7 days

    def __init__(self, backend: IHistoryBackend, ttl: int = DEFAULT_TTL) -> None:
        self._backend = backend
        self._ttl = ttl

    @staticmethod
    def key(workflow_id: str, seq: int) -> str:
        return f"history:{workflow_id}:{seq}"

    @staticmethod
    def fingerprint(params_json: str) -> str:
        return hashlib.sha256(params_json.encode("utf-8")).hexdigest()

    def get(self, workflow_id: str, seq: int, params_json: str) -> str | None:
        """Recorded result for this call, or None.

        Raises:
            HistoryMismatchError: the entry was recorded for different input.
        """
        raw = self._backend.get(self.key(workflow_id, seq))
        if raw is None:
            return None
        entry = json.loads(raw)
        if entry["params"] != self.fingerprint(params_json):
            raise HistoryMismatchError(workflow_id, seq)
        return entry["result"]

    def record(self, workflow_id: str, seq: int, params_json: str, payload: str) -> str:
        """Record ``payload`` unless another run got there first; return the kept result."""
        entry = json.dumps({"params": self.fingerprint(params_json), "result": payload})
        if self._backend.put_if_absent(self.key(workflow_id, seq), entry, self._ttl):
            return payload
        recorded = self.get(workflow_id, seq, params_json)
        return payload if recorded is None else recorded

    def clear(self, workflow_id: str, seqs: Iterable[int]) -> None:
        """Drop the entries a finished run recorded or replayed."""
        self._backend.delete_many([self.key(workflow_id, seq) for seq in seqs])
