"""Create the reports bucket on a local S3 emulator (LocalStack, MinIO).

Usage:
    python scripts/create_reports_bucket.py --endpoint-url http://localhost:4566 --bucket reports
"""

from __future__ import annotations

import argparse
from typing import Any

import boto3
from botocore.exceptions import ClientError


def create_bucket(client: Any, bucket: str, region: str = "us-east-1") -> bool:
    """Create ``bucket`` unless it exists. Returns True when it was created."""
    try:
        client.head_bucket(Bucket=bucket)
        print(f"  Bucket {bucket} already exists, skipping")
        return False
    except ClientError as exc:
        if exc.response.get("Error", {}).get("Code") not in ("404", "NoSuchBucket"):
            raise

    kwargs: dict[str, Any] = {"Bucket": bucket}
    if region != "us-east-1":
        kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
    client.create_bucket(**kwargs)
    print(f"  Created bucket {bucket}")
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the CVA Enduro reports bucket")
    parser.add_argument("--endpoint-url", default=None, help="S3 endpoint (e.g. http://localhost:4566)")
    parser.add_argument("--bucket", default="reports", help="Bucket name")
    parser.add_argument("--region", default="us-east-1", help="AWS region")
    args = parser.parse_args()

    kwargs: dict[str, Any] = {"region_name": args.region}
    if args.endpoint_url:
        kwargs["endpoint_url"] = args.endpoint_url

    client = boto3.client("s3", **kwargs)

    print("Creating bucket...")
    create_bucket(client, args.bucket, region=args.region)

    print("Done!")


if __name__ == "__main__":
    main()
