"""Redis backend for the activity history, implementing IHistoryBackend."""

from __future__ import annotations

import redis

from cva_enduro.core.exceptions import HistoryStoreError


class RedisHistoryBackend:
    """Write-once expiring history entries stored in Redis.

    Entries are created with ``SET NX EX`` so two workers racing on the same
    workflow call agree on whichever result was recorded first.
    """

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0) -> None:
        self._address = f"{host}:{port}/{db}"
        self._client = redis.Redis(host=host, port=port, db=db, decode_responses=True)

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError as exc:
            raise HistoryStoreError(f"history store {self._address} unreachable: {exc}") from exc

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            raise HistoryStoreError(f"history lookup failed for {key!r}: {exc}") from exc

    def put_if_absent(self, key: str, value: str, ttl: int) -> bool:
        try:
            return bool(self._client.set(key, value, ex=ttl, nx=True))
        except redis.RedisError as exc:
            raise HistoryStoreError(f"history record failed for {key!r}: {exc}") from exc

    def delete_many(self, keys: list[str]) -> int:
        if not keys:
            return 0
        try:
            return int(self._client.delete(*keys))
        except redis.RedisError as exc:
            raise HistoryStoreError(f"history clear failed for {keys[0]!r}..: {exc}") from exc
