"""
Object storage on S3.

Generated previews are stored under a time-based key with a random short id,
so two files with the same name never collide:

    2026/10/19/14/5/Xk3v9Qa1/thumbnail_400x300_1a2b3c4d.png

Objects get the sniffed MIME type and far-future caching headers, and are
handed back as presigned download URLs.

Sources can also come from storage, addressed as s3://bucket/key.

boto3 is blocking; the async methods push each call onto a thread.
"""

import asyncio
import logging
import os
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config.settings import settings
from integrations.mime import detect_mime_type
from models.errors import PreviewError

logger = logging.getLogger(__name__)

STORAGE_SCHEME = "s3://"


def is_storage_uri(uri: str) -> bool:
    """True for URIs like s3://my-bucket/my-object-key."""
    return uri.startswith(STORAGE_SCHEME)


def parse_storage_uri(uri: str) -> tuple[str, str]:
    """Split s3://bucket/path/to/key into ("bucket", "path/to/key")."""
    if not is_storage_uri(uri):
        raise ValueError(f"Not a storage URI: {uri}")
    bucket, _, key = uri[len(STORAGE_SCHEME):].partition("/")
    if not bucket or not key:
        raise ValueError(f"Storage URI needs both a bucket and a key: {uri}")
    return bucket, key


def build_key(filename: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    short_id = secrets.token_urlsafe(6)
    return f"{now.year}/{now.month}/{now.day}/{now.hour}/{now.minute}/{short_id}/{filename}"


def get_s3_client():
    """S3 client with credentials from settings, falling back to the default AWS chain."""
    try:
        client = boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )
        logger.info("S3 client initialized")
        return client
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Failed to initialize S3 client: {e}")
        raise


class S3Storage:

    def __init__(self, client=None, bucket: Optional[str] = None):
        self._client = client
        self._bucket = bucket or settings.S3_BUCKET

    @property
    def client(self):
        if self._client is None:
            self._client = get_s3_client()
        return self._client

    async def put(self, path: str) -> str:
        """Upload a local file and return a presigned download URL for it."""
        return await asyncio.to_thread(self._put, path)

    def _put(self, path: str) -> str:
        key = build_key(os.path.basename(path))
        expires = datetime.now(timezone.utc) + timedelta(days=settings.STORAGE_EXPIRES_DAYS)

        try:
            with open(path, "rb") as body:
                self.client.put_object(
                    Bucket=self._bucket,
                    Key=key,
                    Body=body,
                    ContentType=detect_mime_type(path),
                    CacheControl=f"max-age={settings.STORAGE_CACHE_MAX_AGE}",
                    Expires=expires,
                )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Unable to store {path} in S3: {e}")
            raise PreviewError("Unable to store a file") from e

        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=settings.STORAGE_SIGNED_URL_EXPIRES,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Unable to sign a download URL for {key}: {e}")
            raise PreviewError("Unable to generate a signed URL for a stored file") from e

    async def head_metadata(self, uri: str) -> dict:
        bucket, key = parse_storage_uri(uri)
        try:
            response = await asyncio.to_thread(self.client.head_object, Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise PreviewError(f"Unable to read metadata for {uri}: {e}") from e
        return {
            "content_type": response.get("ContentType"),
            "content_length": response.get("ContentLength"),
            "last_modified": response.get("LastModified"),
        }

    async def get(self, uri: str):
        """Return the object's streaming body (botocore StreamingBody)."""
        bucket, key = parse_storage_uri(uri)
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise PreviewError(f"Unable to fetch {uri}: {e}") from e
        return response["Body"]
