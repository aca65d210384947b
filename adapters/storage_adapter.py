"""
Image storage backends: a local upload directory or an S3 bucket.

Both share the same validation so an upload is rejected before any byte is
written. The backend is picked once, when the application context is built.
"""

from __future__ import annotations

import logging
import os
import tempfile
import uuid
from pathlib import Path, PurePath
from typing import NamedTuple, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.exceptions import (
    PayloadTooLargeError,
    ServiceValidationError,
    StorageUnavailableError,
    UnsupportedMediaTypeError,
)

logger = logging.getLogger("kitchen.storage")

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
}


def image_extension(filename: str) -> Optional[str]:
    """Lower-cased extension of ``filename`` if it is an accepted image type."""
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    return suffix if suffix in CONTENT_TYPES else None


class ImageUpload(NamedTuple):
    """An uploaded file read into memory"""

    filename: str
    content: bytes


class BaseStorageBackend:
    """Validation and key generation shared by every backend."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    def validate(self, content: bytes, original_filename: str) -> str:
        """
        Check an upload without writing it.

        Returns:
            The normalised extension.

        Raises:
            UnsupportedMediaTypeError: not a JPEG, PNG or WEBP file name
            PayloadTooLargeError: content longer than ``max_bytes``
            ServiceValidationError: empty content
        """
        ext = image_extension(original_filename)
        if ext is None:
            raise UnsupportedMediaTypeError(details={"filename": original_filename})
        if len(content) > self.max_bytes:
            raise PayloadTooLargeError(
                f"File size ({len(content)} bytes) exceeds maximum allowed size "
                f"({self.max_bytes} bytes)"
            )
        if not content:
            raise ServiceValidationError("Uploaded file is empty")
        return ext

    def store(self, content: bytes, original_filename: str) -> str:
        """Validate then persist ``content``; returns the reference to save with the record."""
        ext = self.validate(content, original_filename)
        name = f"{uuid.uuid4()}.{ext}"
        return self._write(name, content, CONTENT_TYPES[ext])

    def _write(self, name: str, content: bytes, content_type: str) -> str:
        raise NotImplementedError


class LocalStorageBackend(BaseStorageBackend):
    """Writes uploads into a directory served under ``url_prefix``."""

    def __init__(self, upload_dir: str, url_prefix: str, max_bytes: int):
        super().__init__(max_bytes)
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _write(self, name: str, content: bytes, content_type: str) -> str:
        target = self.upload_dir / name
        tmp_path = None
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            # Write beside the target and rename so a half-written file is never served
            fd, tmp_path = tempfile.mkstemp(dir=self.upload_dir, suffix=".part")
            with os.fdopen(fd, "wb") as fh:
                fh.write(content)
            os.replace(tmp_path, target)
            tmp_path = None
        except OSError as exc:
            logger.error("local_store_failed path=%s error=%s", target, exc)
            raise StorageUnavailableError() from exc
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.remove(tmp_path)

        logger.info("image_stored backend=local path=%s bytes=%d", target, len(content))
        return f"{self.url_prefix}/{name}"

    def retrieve_url(self, reference: str) -> str:
        if reference.startswith(("/", "http://", "https://")):
            return reference
        return f"{self.url_prefix}/{reference}"


class S3StorageBackend(BaseStorageBackend):
    """
    Uploads to an S3 bucket under ``uploads/``.

    Credentials come from the ambient boto3 chain (environment, profile, role).
    """

    key_prefix = "uploads"

    def __init__(self, bucket: str, region: str, max_bytes: int, client=None):
        super().__init__(max_bytes)
        self.bucket = bucket
        self.region = region
        self._client = client or boto3.client("s3", region_name=region)

    def _write(self, name: str, content: bytes, content_type: str) -> str:
        key = f"{self.key_prefix}/{name}"
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("s3_store_failed bucket=%s key=%s error=%s", self.bucket, key, exc)
            raise StorageUnavailableError() from exc

        logger.info("image_stored backend=s3 bucket=%s key=%s", self.bucket, key)
        return self.retrieve_url(key)

    def retrieve_url(self, reference: str) -> str:
        if reference.startswith(("http://", "https://")):
            return reference
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{reference.lstrip('/')}"


STATIC_URL_PREFIX = "/static/"

PLACEHOLDER_SVG = """\
<svg xmlns="http://www.w3.org/2000/svg" width="400" height="300" viewBox="0 0 400 300">
  <rect width="400" height="300" fill="#eceff1"/>
  <rect x="130" y="85" width="140" height="100" rx="8" fill="none" stroke="#90a4ae" stroke-width="6"/>
  <circle cx="170" cy="120" r="12" fill="#90a4ae"/>
  <path d="M140 175 L190 135 L220 160 L240 145 L262 175 Z" fill="#90a4ae"/>
  <text x="200" y="230" font-family="sans-serif" font-size="20" fill="#607d8b"
        text-anchor="middle">No picture</text>
</svg>
"""


def install_placeholder(static_dir: str, placeholder_url: str) -> Optional[Path]:
    """
    Write the default placeholder image into ``static_dir`` if it is missing.

    Only ``.svg`` URLs served by the ``/static`` mount are generated; an
    existing file (an operator's own placeholder) is never overwritten.
    """
    if not placeholder_url.startswith(STATIC_URL_PREFIX):
        return None
    target = Path(static_dir) / placeholder_url[len(STATIC_URL_PREFIX):]
    if target.exists():
        return target
    if target.suffix.lower() != ".svg":
        logger.warning("placeholder_missing path=%s", target)
        return None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(PLACEHOLDER_SVG, encoding="utf-8")
    except OSError as exc:
        logger.error("placeholder_install_failed path=%s error=%s", target, exc)
        raise StorageUnavailableError() from exc
    logger.info("placeholder_installed path=%s", target)
    return target


def build_storage_backend(settings: Settings) -> BaseStorageBackend:
    """Pick the backend named by ``settings.s3_enabled``."""
    if settings.s3_enabled:
        logger.info(
            "Using S3 image storage bucket=%s region=%s",
            settings.s3_bucket_name,
            settings.aws_region,
        )
        return S3StorageBackend(
            bucket=settings.s3_bucket_name,
            region=settings.aws_region,
            max_bytes=settings.max_upload_bytes,
        )

    logger.info("Using local image storage dir=%s", settings.upload_dir)
    return LocalStorageBackend(
        upload_dir=settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_bytes=settings.max_upload_bytes,
    )
