"""
VidTube Media Storage: forwards uploaded files to S3-compatible object
storage (MinIO by default) and returns the public URL to persist.

Upload failures are terminal for the request: they surface as ``ApiError``
with status 500 and are never retried.
"""
from __future__ import annotations

import asyncio
import logging
import mimetypes
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import AsyncIterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile

from vidtube.core.config import Settings, get_settings
from vidtube.core.errors import ApiError

logger = logging.getLogger(__name__)
settings = get_settings()

VIDEO = "video"
IMAGE = "image"


@dataclass
class UploadedMedia:
    url: str
    key: str
    size: int
    content_type: str


def build_s3_client(cfg: Settings):
    endpoint = cfg.storage_endpoint
    endpoint_url = endpoint if "://" in endpoint else f"{'https' if cfg.storage_secure else 'http'}://{endpoint}"
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=cfg.storage_access_key,
        aws_secret_access_key=cfg.storage_secret_key,
        region_name=cfg.storage_region,
    )


class MediaStorage:
    """Thin async wrapper around a boto3 S3 client."""

    def __init__(self, client=None, cfg: Optional[Settings] = None):
        self._cfg = cfg or settings
        self._client = client
        self.bucket = self._cfg.storage_bucket

    @property
    def client(self):
        if self._client is None:
            self._client = build_s3_client(self._cfg)
        return self._client

    def public_url(self, key: str) -> str:
        if self._cfg.storage_public_url:
            return f"{self._cfg.storage_public_url.rstrip('/')}/{key}"
        endpoint = self._cfg.storage_endpoint
        if "://" in endpoint:
            return f"{endpoint.rstrip('/')}/{self.bucket}/{key}"
        scheme = "https" if self._cfg.storage_secure else "http"
        return f"{scheme}://{endpoint}/{self.bucket}/{key}"

    @staticmethod
    def object_key(folder: str, filename: str, content_type: str) -> str:
        ext = PurePosixPath(filename or "").suffix.lower()
        if not ext:
            ext = mimetypes.guess_extension(content_type or "") or ""
        return f"{folder}/{uuid.uuid4().hex}{ext}"

    async def upload(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        folder: str,
        label: str = "File",
    ) -> UploadedMedia:
        key = self.object_key(folder, filename, content_type)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Upload of %s to %s/%s failed: %s", filename, self.bucket, key, e)
            raise ApiError(500, f"{label} upload failed") from e

        logger.info("Stored %s (%d bytes) at %s/%s", filename, len(data), self.bucket, key)
        return UploadedMedia(url=self.public_url(key), key=key, size=len(data), content_type=content_type)

    async def delete(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.warning("Could not delete %s/%s: %s", self.bucket, key, e)
            return False
        return True

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = self.public_url("")
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    async def discard(self, url: Optional[str]) -> bool:
        """Delete the object behind a previously returned public URL."""
        key = self.key_from_url(url) if url else None
        if not key:
            return False
        return await self.delete(key)


async def read_upload(file: Optional[UploadFile], kind: str, label: str, required: bool = True) -> Optional[bytes]:
    """
    Validate an incoming multipart file against the upload constraints and
    return its bytes. Returns None for an absent optional file.
    """
    if file is None or not file.filename:
        if required:
            raise ApiError(400, f"{label} is required")
        return None

    if kind == VIDEO:
        allowed, max_mb = settings.allowed_video_types, settings.max_video_size_mb
    else:
        allowed, max_mb = settings.allowed_image_types, settings.max_image_size_mb

    if file.content_type not in allowed:
        raise ApiError(400, f"{label} must be one of: {', '.join(allowed)}")

    limit = max_mb * 1024 * 1024
    # the multipart parser records the spooled size; reject before buffering it
    if file.size is not None and file.size > limit:
        raise ApiError(400, f"{label} exceeds the {max_mb}MB limit")

    data = await file.read()
    if not data:
        raise ApiError(400, f"{label} is empty")
    if len(data) > limit:
        raise ApiError(400, f"{label} exceeds the {max_mb}MB limit")
    return data


async def store_upload(
    storage: MediaStorage,
    file: Optional[UploadFile],
    kind: str,
    folder: str,
    label: str,
    required: bool = True,
) -> Optional[UploadedMedia]:
    data = await read_upload(file, kind, label, required=required)
    if data is None:
        return None
    return await storage.upload(data, file.filename, file.content_type, folder, label=label)


@asynccontextmanager
async def discard_on_failure(storage: MediaStorage) -> AsyncIterator[List[UploadedMedia]]:
    """
    Collect media stored during a multi-step write. If the block raises, every
    collected object is removed from the bucket before the error propagates.
    """
    stored: List[UploadedMedia] = []
    try:
        yield stored
    except Exception:
        for media in stored:
            await storage.discard(media.url)
        logger.warning("Discarded %d orphaned upload(s) after a failed write", len(stored))
        raise


media_storage = MediaStorage()


def get_media_storage() -> MediaStorage:
    return media_storage
