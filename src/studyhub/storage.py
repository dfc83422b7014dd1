"""Persistence of raw uploaded bytes."""
from __future__ import annotations

import asyncio
import hashlib
import logging
import re
from pathlib import Path
from typing import Any, Final, Protocol
from urllib.parse import urlparse
from urllib.request import url2pathname
from uuid import uuid4

from studyhub.errors import StorageError
from studyhub.models import IncomingFile, UploadedFile

LOGGER = logging.getLogger(__name__)

_FILENAME_SAFE_CHARS_RE: Final[re.Pattern[str]] = re.compile(r"[^A-Za-z0-9._-]+")


def _sanitize_filename(filename: str) -> str:
    """Return a filesystem-safe filename preserving the extension when possible."""
    if not filename:
        filename = "upload"
    # Remove any path components and replace disallowed characters.
    sanitized = Path(filename.replace("\\", "/")).name
    sanitized = _FILENAME_SAFE_CHARS_RE.sub("_", sanitized)
    sanitized = sanitized.strip("._") or "upload"
    return sanitized


def _unique_name(filename: str) -> str:
    sanitized = _sanitize_filename(filename)
    base = Path(sanitized).stem or "upload"
    suffix = Path(sanitized).suffix
    return f"{base}-{uuid4().hex}{suffix}" if suffix else f"{base}-{uuid4().hex}"


class StorageService(Protocol):
    async def save_file(self, upload: IncomingFile, *, user_id: str, job_id: str) -> UploadedFile:
        ...

    def read_file(self, file: UploadedFile) -> bytes:
        ...


class LocalStorageService:
    """Store uploads on local disk under ``<base_dir>/<user>/<job>/``."""

    def __init__(self, base_dir: Path | str = "data") -> None:
        self.base_dir = Path(base_dir)

    async def save_file(self, upload: IncomingFile, *, user_id: str, job_id: str) -> UploadedFile:
        target_dir = self.base_dir / _sanitize_filename(user_id) / _sanitize_filename(job_id)
        destination = target_dir / _unique_name(upload.name)
        try:
            await asyncio.to_thread(self._write, destination, upload.data)
        except OSError as error:
            raise StorageError(f"Failed to store {upload.name}: {error}", cause=error) from error

        LOGGER.info("Stored %s (%s bytes) at %s", upload.name, upload.size, destination)
        return UploadedFile(
            id=uuid4().hex,
            user_id=user_id,
            job_id=job_id,
            name=upload.name,
            size=upload.size,
            mime_type=upload.mime_type,
            uri=destination.resolve().as_uri(),
            checksum=hashlib.sha256(upload.data).hexdigest(),
        )

    def read_file(self, file: UploadedFile) -> bytes:
        parsed = urlparse(file.uri)
        if parsed.scheme != "file":
            raise StorageError(f"Unsupported storage reference {file.uri}")
        try:
            return Path(url2pathname(parsed.path)).read_bytes()
        except OSError as error:
            raise StorageError(f"Failed to read {file.name}: {error}", cause=error) from error

    @staticmethod
    def _write(destination: Path, data: bytes) -> None:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)


class FirebaseStorageService:
    """Store uploads in a Firebase Storage bucket."""

    def __init__(self, bucket: Any, prefix: str = "uploads") -> None:
        self._bucket = bucket
        self.prefix = prefix.strip("/")

    async def save_file(self, upload: IncomingFile, *, user_id: str, job_id: str) -> UploadedFile:
        path = "/".join(
            (self.prefix, _sanitize_filename(user_id), _sanitize_filename(job_id), _unique_name(upload.name))
        )
        blob = self._bucket.blob(path)
        try:
            await asyncio.to_thread(blob.upload_from_string, upload.data, content_type=upload.mime_type)
        except Exception as error:
            raise StorageError(f"Failed to store {upload.name}: {error}", cause=error) from error

        LOGGER.info("Uploaded %s (%s bytes) to bucket %s", upload.name, upload.size, self._bucket.name)
        return UploadedFile(
            id=uuid4().hex,
            user_id=user_id,
            job_id=job_id,
            name=upload.name,
            size=upload.size,
            mime_type=upload.mime_type,
            uri=f"gs://{self._bucket.name}/{path}",
            checksum=hashlib.sha256(upload.data).hexdigest(),
            metadata={"storagePath": path},
        )

    def read_file(self, file: UploadedFile) -> bytes:
        prefix = f"gs://{self._bucket.name}/"
        if not file.uri.startswith(prefix):
            raise StorageError(f"Unsupported storage reference {file.uri}")
        try:
            return self._bucket.blob(file.uri[len(prefix):]).download_as_bytes()
        except Exception as error:
            raise StorageError(f"Failed to read {file.name}: {error}", cause=error) from error
