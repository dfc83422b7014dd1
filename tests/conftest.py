"""Shared fixtures isolating settings, caches and on-disk state per test."""
from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from studyhub.config import get_settings
from studyhub.llm import reset_llm_config_cache
from studyhub.models import UploadedFile
from studyhub.services import dependencies


def _clear_caches() -> None:
    get_settings.cache_clear()
    reset_llm_config_cache()
    dependencies.get_status_tracker.cache_clear()
    dependencies.get_upload_orchestrator.cache_clear()
    dependencies.get_deck_service.cache_clear()


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    monkeypatch.setenv("STUDYHUB_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    for name in ("STORAGE_BACKEND", "JOB_STORE", "FLASHCARD_STORE", "LLM_OPTIONS_PATH"):
        monkeypatch.delenv(name, raising=False)
    _clear_caches()
    yield tmp_path
    _clear_caches()


def make_uploaded_file(
    name: str = "notes.txt",
    mime_type: str = "text/plain",
    *,
    file_id: str = "file-1",
    size: int = 0,
) -> UploadedFile:
    return UploadedFile(
        id=file_id,
        user_id="user-1",
        job_id="job-1",
        name=name,
        size=size,
        mime_type=mime_type,
        uri=f"memory://{file_id}",
    )


class FakeSnapshot:
    def __init__(self, data):
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection: dict, document_id: str) -> None:
        self._collection = collection
        self._document_id = document_id

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self._collection.get(self._document_id))

    def set(self, data) -> None:
        self._collection[self._document_id] = dict(data)


class FakeCollection:
    def __init__(self, documents: dict) -> None:
        self._documents = documents

    def document(self, document_id: str) -> FakeDocumentRef:
        return FakeDocumentRef(self._documents, document_id)


class FakeFirestore:
    """Just enough of ``google.cloud.firestore.Client`` for the Firestore-backed stores."""

    def __init__(self) -> None:
        self.collections: dict[str, dict] = {}

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self.collections.setdefault(name, {}))


@pytest.fixture
def firestore() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def uploaded_file():
    return make_uploaded_file
