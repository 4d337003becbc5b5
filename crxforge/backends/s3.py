"""boto3-backed ``ObjectStore`` for the release bucket.

Set ``s3_endpoint`` (``S3_ENDPOINT``) to target a local S3-compatible
server; path-style addressing is switched on in that case.
"""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError

from crxforge.config import PublishConfig
from crxforge.core.errors import NotFoundError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def _is_not_found(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") in _NOT_FOUND_CODES


class S3ObjectStore:
    """``ObjectStore`` over a single S3 bucket.

    Parameters
    ----------
    config:
        Supplies the bucket, endpoint and region.
    client:
        Pre-built boto3 S3 client (tests pass a stubbed one).
    """

    def __init__(self, config: PublishConfig, client: Any | None = None) -> None:
        self.bucket = config.s3_bucket
        if client is None:
            boto_config = BotoConfig(
                signature_version="s3v4",
                s3={"addressing_style": "path" if config.s3_endpoint else "auto"},
            )
            client = boto3.client(
                "s3",
                endpoint_url=config.s3_endpoint,
                region_name=config.region,
                config=boto_config,
            )
        self._client = client

    def get(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"s3://{self.bucket}/{key} does not exist") from exc
            raise
        return response["Body"].read()

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        grants: dict[str, str] | None = None,
    ) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            **(grants or {}),
        )
        logger.debug("Put s3://%s/%s (%d bytes)", self.bucket, key, len(data))

    def head(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                return False
            raise
        return True

    def put_tags(self, key: str, tags: dict[str, str]) -> None:
        self._client.put_object_tagging(
            Bucket=self.bucket,
            Key=key,
            Tagging={"TagSet": [{"Key": k, "Value": v} for k, v in tags.items()]},
        )

    def get_tags(self, key: str) -> dict[str, str]:
        try:
            response = self._client.get_object_tagging(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(f"s3://{self.bucket}/{key} does not exist") from exc
            raise
        return {tag["Key"]: tag["Value"] for tag in response.get("TagSet", [])}
