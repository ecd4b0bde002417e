"""
Document storage backends.

Uploaded PDFs are stored under generated keys (``pdfs/{epoch_ms}-{uuid}.pdf``)
either on the local filesystem or in an S3 bucket. The database only keeps
the key. boto3 is blocking, so S3 calls run in a worker thread.
"""

from __future__ import annotations

import asyncio
import os
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from pdfshare.server.core.config import Settings

from .errors import PayloadTooLargeError, StorageError, UnsupportedMediaTypeError, ValidationFailedError
from .logging_config import get_logger

logger = get_logger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}
PDF_MAGIC = b"%PDF"


def generate_key(original_name: str) -> str:
    """Build a unique storage key keeping the original extension."""
    ext = Path(original_name or "").suffix.lower().lstrip(".") or "pdf"
    return f"pdfs/{int(time.time() * 1000)}-{uuid.uuid4()}.{ext}"


def validate_pdf_upload(data: bytes, filename: Optional[str], content_type: Optional[str], max_bytes: int) -> None:
    """Check an upload is a non-empty PDF within the size limit.

    Raises:
        ValidationFailedError: Empty upload
        PayloadTooLargeError: Larger than ``max_bytes``
        UnsupportedMediaTypeError: Not declared as PDF or missing the ``%PDF`` header
    """
    if not data:
        raise ValidationFailedError("No file uploaded")
    if len(data) > max_bytes:
        raise PayloadTooLargeError(f"File exceeds the maximum size of {max_bytes} bytes")
    declared_pdf = (content_type or "").split(";")[0].strip().lower() in PDF_CONTENT_TYPES or (
        filename or ""
    ).lower().endswith(".pdf")
    if not declared_pdf or not data.startswith(PDF_MAGIC):
        raise UnsupportedMediaTypeError("Only PDF files are allowed")


class StorageBackend(ABC):
    """Async interface every storage backend implements."""

    @abstractmethod
    async def save(self, data: bytes, original_name: str, content_type: str = "application/pdf") -> str:
        """Store ``data`` and return its key."""

    @abstractmethod
    async def open(self, key: str) -> bytes:
        """Return the stored bytes; raises StorageError when missing."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove the object; missing objects are ignored."""

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    def download_url(self, key: str) -> Optional[str]:
        """Direct URL for the object, when the backend can provide one."""
        return None


class LocalStorage(StorageBackend):
    """Stores documents below a root directory."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self.root = Path(root).resolve()

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise StorageError("Invalid storage key")
        return path

    async def save(self, data: bytes, original_name: str, content_type: str = "application/pdf") -> str:
        key = generate_key(original_name)
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            logger.error(f"Failed to write {key}: {e}", exc_info=True)
            raise StorageError("Failed to store file") from e
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return key

    async def open(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError as e:
            raise StorageError("Stored file is missing") from e
        except OSError as e:
            logger.error(f"Failed to read {key}: {e}", exc_info=True)
            raise StorageError("Failed to read file") from e

    async def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            await asyncio.to_thread(path.unlink, missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete {key}: {e}")

    async def exists(self, key: str) -> bool:
        return self._path(key).is_file()


class S3Storage(StorageBackend):
    """Stores documents in an S3 bucket."""

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        bucket_url: Optional[str] = None,
        client=None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.bucket_url = bucket_url.rstrip("/") if bucket_url else None
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    async def save(self, data: bytes, original_name: str, content_type: str = "application/pdf") -> str:
        key = generate_key(original_name)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
                Metadata={"original-name": original_name.encode("ascii", "ignore").decode("ascii")},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {key} to S3: {e}", exc_info=True)
            raise StorageError("Failed to store file") from e
        logger.info(f"Uploaded {key} to S3 bucket {self.bucket}")
        return key

    async def open(self, key: str) -> bytes:
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
            return await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise StorageError("Stored file is missing") from e
            logger.error(f"Error downloading {key} from S3: {e}", exc_info=True)
            raise StorageError("Failed to read file") from e
        except BotoCoreError as e:
            logger.error(f"Error downloading {key} from S3: {e}", exc_info=True)
            raise StorageError("Failed to read file") from e

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
            logger.info(f"Deleted {key} from S3")
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Error deleting {key} from S3: {e}")

    async def exists(self, key: str) -> bool:
        try:
            await asyncio.to_thread(self.client.head_object, Bucket=self.bucket, Key=key)
            return True
        except ClientError:
            return False

    def presigned_url(self, key: str, expires_in: int = 3600) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )

    def public_url(self, key: str) -> str:
        if self.bucket_url:
            return f"{self.bucket_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def download_url(self, key: str) -> Optional[str]:
        try:
            return self.presigned_url(key)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Could not presign {key}: {e}")
            return None


def build_storage(settings: Settings) -> StorageBackend:
    """Instantiate the backend selected by ``STORAGE_BACKEND``."""
    storage = settings.storage
    if storage.backend.lower() == "s3":
        s3 = settings.s3
        if not s3.bucket_name:
            raise ValueError("AWS_S3_BUCKET_NAME is required when STORAGE_BACKEND=s3")
        logger.info(f"Using S3 storage backend (bucket={s3.bucket_name})")
        return S3Storage(
            bucket=s3.bucket_name,
            region=s3.region,
            access_key_id=s3.access_key_id,
            secret_access_key=s3.secret_access_key,
            bucket_url=s3.bucket_url,
        )
    logger.info(f"Using local storage backend at {storage.upload_path}")
    return LocalStorage(storage.upload_path)
