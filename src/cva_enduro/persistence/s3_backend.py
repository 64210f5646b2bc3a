"""S3 report storage backend implementing IFileStore."""

from __future__ import annotations

import io
from contextlib import contextmanager
from typing import IO, Iterator

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from cva_enduro.core.cancellation import raise_if_cancelled
from cva_enduro.core.exceptions import StorageError
from cva_enduro.persistence.blob import BlobWriter


class S3FileStore:
    """Production IFileStore backed by S3 or an S3-compatible service."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None, prefix: str = "",
                 access_key: str | None = None, secret_key: str | None = None,
                 path_style: bool = False) -> None:
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        self._prefix = prefix
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if access_key and secret_key:
            kwargs["aws_access_key_id"] = access_key
            kwargs["aws_secret_access_key"] = secret_key
        if path_style:
            kwargs["config"] = Config(s3={"addressing_style": "path"})
        self._client = boto3.client("s3", **kwargs)

    def key_for(self, path: str) -> str:
        return f"{self._prefix}{path}"

    def open_writer(self, path: str, content_type: str = "application/octet-stream") -> BlobWriter:
        key = self.key_for(path)
        return BlobWriter(key, lambda data: self._put(key, data, content_type))

    @contextmanager
    def open_reader(self, path: str) -> Iterator[IO[bytes]]:
        key = self.key_for(path)
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 open reader failed for {key!r}: {exc}") from exc
        body = resp["Body"]
        try:
            yield body
        finally:
            body.close()

    def read(self, path: str) -> bytes:
        key = self.key_for(path)
        try:
            resp = self._client.get_object(Bucket=self._bucket, Key=key)
            return resp["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 read failed for {key!r}: {exc}") from exc

    def write(self, path: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        key = self.key_for(path)
        self._put(key, data, content_type)
        return key

    def _put(self, key: str, data: bytes, content_type: str) -> None:
        raise_if_cancelled(f"S3 write of {key!r}")
        try:
            self._client.put_object(
                Bucket=self._bucket, Key=key, Body=io.BytesIO(data), ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"S3 write failed for {key!r}: {exc}") from exc
