"""
MinIO (S3-compatible) client for photo storage.

Objects are keyed by the derived filename (see services.photo.derive_key)
and served back through GET /api/photo/{key}. boto3 is synchronous; the
services call into this module through the threadpool.
"""
import logging
from io import BytesIO
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError

from photofeed.config import settings
from photofeed.errors import PhotoNotFound, StorageError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class PhotoStore:
    def __init__(self, client=None, bucket: str = settings.minio_bucket) -> None:  # noqa: ANN001
        self._s3 = client
        self.bucket = bucket

    def init(self) -> None:
        """Create the S3 client and ensure the photo bucket exists."""
        if self._s3 is None:
            scheme = "https" if settings.minio_use_ssl else "http"
            self._s3 = boto3.client(
                "s3",
                endpoint_url=f"{scheme}://{settings.minio_endpoint}",
                aws_access_key_id=settings.minio_access_key,
                aws_secret_access_key=settings.minio_secret_key,
                config=Config(signature_version="s3v4"),
                region_name="us-east-1",
            )

        existing = [b["Name"] for b in self._s3.list_buckets().get("Buckets", [])]
        if self.bucket not in existing:
            self._s3.create_bucket(Bucket=self.bucket)
            logger.info("Created MinIO bucket '%s'", self.bucket)
        else:
            logger.info("MinIO bucket '%s' already exists", self.bucket)

    def _client(self):
        if self._s3 is None:
            raise RuntimeError("MinIO client not initialised — call init() at startup")
        return self._s3

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> None:
        op = "storage.s3.put"
        kwargs = {"Bucket": self.bucket, "Key": key, "Body": BytesIO(data)}
        if content_type:
            kwargs["ContentType"] = content_type
        try:
            self._client().put_object(**kwargs)
        except ClientError as exc:
            logger.error("%s failed for %s: %s", op, key, exc)
            raise StorageError(op, exc) from exc
        logger.debug("Uploaded photo to MinIO: %s (%d bytes)", key, len(data))

    def get(self, key: str) -> bytes:
        op = "storage.s3.get"
        try:
            result = self._client().get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES:
                raise PhotoNotFound() from exc
            logger.error("%s failed for %s: %s", op, key, exc)
            raise StorageError(op, exc) from exc

        body = result["Body"]
        try:
            return body.read()
        finally:
            body.close()


# Singleton
photo_store = PhotoStore()


def get_photo_store() -> PhotoStore:
    """FastAPI dependency; overridden in tests."""
    return photo_store
