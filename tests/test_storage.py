from __future__ import annotations

import asyncio
import hashlib
from pathlib import Path
from types import SimpleNamespace

import pytest

from studyhub.errors import StorageError
from studyhub.models import IncomingFile
from studyhub.storage import FirebaseStorageService, LocalStorageService, _sanitize_filename


def test_local_storage_round_trip(tmp_path: Path) -> None:
    storage = LocalStorageService(tmp_path / "uploads")
    upload = IncomingFile(name="../../etc/notes v1.txt", mime_type="text/plain", data=b"hello")

    stored = asyncio.run(storage.save_file(upload, user_id="user 1", job_id="job-1"))

    assert stored.name == "../../etc/notes v1.txt"
    assert stored.size == 5
    assert stored.checksum == hashlib.sha256(b"hello").hexdigest()
    assert stored.uri.startswith("file://")
    path = next((tmp_path / "uploads" / "user_1" / "job-1").iterdir())
    assert path.name.startswith("notes_v1-") and path.suffix == ".txt"
    assert storage.read_file(stored) == b"hello"


def test_local_storage_rejects_foreign_uri(tmp_path: Path) -> None:
    storage = LocalStorageService(tmp_path)
    stored = asyncio.run(
        storage.save_file(IncomingFile("a.txt", "text/plain", b"a"), user_id="u", job_id="j")
    )

    with pytest.raises(StorageError, match="Unsupported storage reference"):
        storage.read_file(SimpleNamespace(uri="gs://bucket/a.txt", name=stored.name))


class _FakeBlob:
    def __init__(self, bucket: "_FakeBucket", path: str) -> None:
        self._bucket = bucket
        self.path = path

    def upload_from_string(self, data: bytes, content_type: str) -> None:
        self._bucket.objects[self.path] = (data, content_type)

    def download_as_bytes(self) -> bytes:
        return self._bucket.objects[self.path][0]


class _FakeBucket:
    name = "study-bucket"

    def __init__(self) -> None:
        self.objects = {}

    def blob(self, path: str) -> _FakeBlob:
        return _FakeBlob(self, path)


def test_firebase_storage_uploads_under_user_and_job() -> None:
    bucket = _FakeBucket()
    storage = FirebaseStorageService(bucket)

    stored = asyncio.run(
        storage.save_file(IncomingFile("slides.pdf", "application/pdf", b"%PDF"), user_id="u1", job_id="j1")
    )

    (path, (data, content_type)), = bucket.objects.items()
    assert path.startswith("uploads/u1/j1/slides-")
    assert content_type == "application/pdf"
    assert stored.uri == f"gs://study-bucket/{path}"
    assert stored.metadata == {"storagePath": path}
    assert storage.read_file(stored) == b"%PDF"


def test_firebase_storage_wraps_upload_failures() -> None:
    class _BrokenBucket(_FakeBucket):
        def blob(self, path: str):
            return SimpleNamespace(upload_from_string=_raise)

    def _raise(*args, **kwargs):
        raise ConnectionError("bucket offline")

    storage = FirebaseStorageService(_BrokenBucket())

    with pytest.raises(StorageError, match="bucket offline"):
        asyncio.run(storage.save_file(IncomingFile("a.txt", "text/plain", b"a"), user_id="u", job_id="j"))


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("", "upload"), ("a/b/c.pdf", "c.pdf"), ("..", "upload"), ("my notes (1).txt", "my_notes_1_.txt")],
)
def test_sanitize_filename(raw: str, expected: str) -> None:
    assert _sanitize_filename(raw) == expected


def test_firebase_bucket_must_be_configured() -> None:
    from studyhub.config import Settings
    from studyhub.firebase import storage_bucket

    with pytest.raises(StorageError, match="FIREBASE_BUCKET_NAME"):
        storage_bucket(Settings(firebase_bucket=None))
