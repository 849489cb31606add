"""
Media store backed by AWS S3 (or compatible services like MinIO).

Objects are written with explicit content types and optional SSE-KMS. Stored
references are public URLs: the CloudFront domain when configured, then an
explicit `MEDIA_PUBLIC_URL`, then the bucket's own endpoint.
"""

from __future__ import annotations

from typing import Optional, Dict, Any
import logging

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .errors import StorageError
from .storage import MediaStore, StoredMedia

logger = logging.getLogger("seva.storage_s3")


class S3MediaStore(MediaStore):
    """Wrapper over boto3 with sane defaults for image objects."""

    provider = "s3"

    def __init__(self, settings: Settings) -> None:
        super().__init__(settings.media_prefix)
        session_kwargs = {}

        if settings.s3_access_key_id and settings.s3_secret_access_key:
            session_kwargs.update(
                aws_access_key_id=settings.s3_access_key_id,
                aws_secret_access_key=settings.s3_secret_access_key,
            )

        session = (
            boto3.session.Session(**session_kwargs)
            if session_kwargs
            else boto3.session.Session()
        )

        client_kwargs = {
            "service_name": "s3",
            "region_name": settings.s3_region,
            "config": Config(signature_version="s3v4"),
        }
        if settings.s3_endpoint:
            client_kwargs["endpoint_url"] = settings.s3_endpoint
        if settings.s3_use_ssl is False:
            client_kwargs["use_ssl"] = False

        self._client = session.client(**client_kwargs)
        self._bucket = settings.s3_bucket
        self._region = settings.s3_region
        self._endpoint = settings.s3_endpoint
        self._kms_key_id = settings.kms_key_id
        self._cloudfront_domain = settings.cloudfront_domain
        self._public_url = (settings.media_public_url or "").rstrip("/")

    # ---------- helpers ----------
    def _apply_object_defaults(
        self, extra: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self._kms_key_id:
            params["ServerSideEncryption"] = "aws:kms"
            params["SSEKMSKeyId"] = self._kms_key_id
        if extra:
            params.update(extra)
        return params

    def url_for(self, key: str) -> str:
        if self._cloudfront_domain:
            return f"https://{self._cloudfront_domain}/{key}"
        if self._public_url:
            return f"{self._public_url}/{key}"
        if self._endpoint:
            return f"{self._endpoint.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    # ---------- object helpers ----------
    def put_object(
        self, key: str, data: bytes, content_type: Optional[str] = None
    ) -> None:
        extra = {"Metadata": {"managed-by": "seva-backend"}}
        if content_type:
            extra["ContentType"] = content_type
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                **self._apply_object_defaults(extra),
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"put_object failed for {key}: {exc}") from exc

    def delete_object(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"delete_object failed for {key}: {exc}") from exc

    def ensure_bucket(self) -> None:
        """Best-effort check that bucket exists (useful for local MinIO)."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code")
            if error_code in {"404", "NoSuchBucket"}:
                logger.info(
                    "Bucket %s missing; attempting to create for dev/local use",
                    self._bucket,
                )
                params = {"Bucket": self._bucket}
                if self._region and self._region != "us-east-1":
                    params["CreateBucketConfiguration"] = {"LocationConstraint": self._region}
                self._client.create_bucket(**params)
            else:
                raise

    # ---------- MediaStore ----------
    async def store(self, data: bytes, namespace: str, name: str, content_type: str) -> StoredMedia:
        key = self.build_key(namespace, name)
        await run_in_threadpool(self.put_object, key, data, content_type)
        logger.info("Uploaded image to s3://%s/%s (%d bytes)", self._bucket, key, len(data))
        return StoredMedia(url=self.url_for(key), key=key)

    async def delete(self, key: str) -> None:
        await run_in_threadpool(self.delete_object, key)
        logger.info("Deleted s3://%s/%s", self._bucket, key)

    async def close(self) -> None:
        self._client.close()


__all__ = ["S3MediaStore"]
