"""Pluggable persistence backends behind Protocol interfaces."""

from __future__ import annotations

from cva_enduro.core.config import AppSettings
from cva_enduro.persistence.memory_backend import MemoryHistoryBackend
from cva_enduro.persistence.redis_history import RedisHistoryBackend
from cva_enduro.persistence.s3_backend import S3FileStore


def create_persistence(settings: AppSettings):
    """Create wired-up persistence backends from application settings.

    The activity history falls back to an in-process backend when no Redis
    server is configured; an interrupted run then cannot be resumed by
    another process.

    Returns:
        Tuple of (file_store, history_backend).
    """
    bucket = settings.reports_bucket
    file_store = S3FileStore(
        bucket=bucket.bucket,
        region=bucket.region,
        endpoint_url=bucket.endpoint_url,
        prefix=bucket.prefix,
        access_key=bucket.access_key,
        secret_key=bucket.secret_key,
        path_style=bucket.path_style,
    )

    if settings.redis is None:
        history_backend = MemoryHistoryBackend()
    else:
        history_backend = RedisHistoryBackend(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
        )

    return file_store, history_backend
