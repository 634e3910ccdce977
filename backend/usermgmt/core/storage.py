"""
Blob storage for user-uploaded files (avatars).

Two backends share the same surface:

- ``S3BlobStore`` puts objects in an S3 (or S3-compatible) bucket via boto3 and
  hands back a public URL.
- ``LocalBlobStore`` writes into a directory on disk, for single-user/local
  operation where no bucket exists.

Both raise ``StorageError`` for any backend failure so callers can decide
whether the failure is fatal (uploads) or tolerated (cleanup).
"""
from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from usermgmt.core.config import Settings

logger = logging.getLogger(__name__)

CONTENT_TYPE_EXT = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class StorageError(Exception):
    """Raised when the blob backend rejects or fails an operation."""


class UploadedFile(Protocol):
    filename: Optional[str]
    content_type: Optional[str]
    file: BinaryIO


class BlobStore(Protocol):
    def upload(self, file: UploadedFile, namespace: str) -> str: ...

    def delete(self, reference: str) -> None: ...


def build_object_key(namespace: str, file: UploadedFile) -> str:
    ct = (file.content_type or "").lower()
    ext = CONTENT_TYPE_EXT.get(ct)
    if not ext:
        suffix = Path(file.filename or "").suffix.lstrip(".").lower()
        ext = suffix or "bin"
    return f"{namespace.strip('/')}/{secrets.token_hex(16)}.{ext}"


class S3BlobStore:
    def __init__(self, bucket: str, region: str, public_base_url: str = "", client=None, endpoint_url: Optional[str] = None):
        self.bucket = bucket
        self.region = region
        self.public_base_url = (public_base_url or "").rstrip("/")
        self.client = client or boto3.client("s3", region_name=region, endpoint_url=endpoint_url)

    def _require_bucket(self) -> None:
        if not self.bucket:
            raise StorageError("S3_BUCKET must be configured to use the S3 backend.")

    def object_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def key_from_reference(self, reference: str) -> str:
        prefixes = [f"https://{self.bucket}.s3.{self.region}.amazonaws.com/"]
        if self.public_base_url:
            prefixes.insert(0, f"{self.public_base_url}/")
        for prefix in prefixes:
            if reference.startswith(prefix):
                return reference[len(prefix):]
        # bare keys are accepted as-is
        return reference.lstrip("/")

    def upload(self, file: UploadedFile, namespace: str) -> str:
        self._require_bucket()
        key = build_object_key(namespace, file)
        extra = {"ContentType": file.content_type} if file.content_type else {}
        try:
            file.file.seek(0)
            self.client.upload_fileobj(file.file, self.bucket, key, ExtraArgs=extra)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 upload failed for {key}") from e
        logger.info("Uploaded s3://%s/%s", self.bucket, key)
        return self.object_url(key)

    def delete(self, reference: str) -> None:
        self._require_bucket()
        key = self.key_from_reference(reference)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 delete failed for {key}") from e
        logger.info("Deleted s3://%s/%s", self.bucket, key)


class LocalBlobStore:
    def __init__(self, root: str, base_url: str = "/uploads"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, file: UploadedFile, namespace: str) -> str:
        key = build_object_key(namespace, file)
        dest = self.root / key
        try:
            os.makedirs(dest.parent, exist_ok=True)
            file.file.seek(0)
            with open(dest, "wb") as f:
                f.write(file.file.read())
        except OSError as e:
            raise StorageError(f"Could not write {dest}") from e
        return f"{self.base_url}/{key}"

    def delete(self, reference: str) -> None:
        key = reference
        if reference.startswith(f"{self.base_url}/"):
            key = reference[len(self.base_url) + 1:]
        target = (self.root / key).resolve()
        if self.root.resolve() not in target.parents:
            raise StorageError(f"Refusing to delete outside uploads dir: {reference}")
        try:
            target.unlink()
        except OSError as e:
            raise StorageError(f"Could not delete {target}") from e


def build_blob_store(settings: Settings) -> BlobStore:
    if settings.storage_backend == "local":
        return LocalBlobStore(settings.uploads_dir, settings.uploads_base_url)
    return S3BlobStore(
        bucket=settings.s3_bucket,
        region=settings.s3_region,
        public_base_url=settings.s3_public_base_url,
        endpoint_url=settings.s3_endpoint_url,
    )
