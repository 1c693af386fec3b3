"""S3 sink: one object per key in a bucket."""
from __future__ import annotations

import os
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from site_harvest.logger import logger

DEFAULT_REGION = "eu-central-1"


class S3Sink:
    """Uploads with ``put_object``.

    Credentials come from the default provider chain; ``profile`` selects a
    named profile and ``region`` falls back to ``AWS_REGION``.
    """

    def __init__(
        self,
        bucket: str,
        *,
        client: Optional[Any] = None,
        profile: Optional[str] = None,
        region: Optional[str] = None,
    ) -> None:
        self.bucket = bucket
        if client is None:
            session = boto3.session.Session(
                profile_name=profile,
                region_name=region or os.environ.get("AWS_REGION", DEFAULT_REGION),
            )
            client = session.client("s3")
        self.client = client

    def put(self, key: str, body: bytes, content_type: str) -> bool:
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("Error uploading %s to s3://%s: %s", key, self.bucket, exc)
            return False
        logger.debug("Uploaded %s to %s", key, self.bucket)
        return True

    def __repr__(self) -> str:
        return f"S3Sink({self.bucket!r})"
