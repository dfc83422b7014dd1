"""Shared service instances handed to the API routers as FastAPI dependencies."""
from __future__ import annotations

import logging
from functools import lru_cache

from studyhub.config import Settings, get_settings
from studyhub.errors import StudyHubError
from studyhub.firebase import firestore_client, storage_bucket
from studyhub.flashcards import (
    DeckService,
    FirestoreDeckStore,
    FirestoreFlashcardRepository,
    FlashcardGenerator,
    FlashcardRepository,
    InMemoryFlashcardRepository,
)
from studyhub.ingest import TextChunker, default_registry
from studyhub.jobs import FirestoreJobStore, InMemoryJobStore, StatusTracker
from studyhub.llm import create_provider
from studyhub.storage import FirebaseStorageService, LocalStorageService, StorageService

from .upload import UploadOrchestrator

LOGGER = logging.getLogger(__name__)


def build_storage(settings: Settings) -> StorageService:
    if settings.storage_backend == "firebase":
        return FirebaseStorageService(storage_bucket(settings))
    if settings.storage_backend != "local":
        raise StudyHubError(f"Unknown storage backend: {settings.storage_backend}")
    return LocalStorageService(settings.data_dir / "uploads")


def build_flashcard_repository(settings: Settings) -> FlashcardRepository:
    if settings.flashcard_store == "firestore":
        return FirestoreFlashcardRepository(firestore_client(settings))
    return InMemoryFlashcardRepository()


def build_upload_orchestrator(settings: Settings, tracker: StatusTracker) -> UploadOrchestrator:
    provider = create_provider(settings.llm_provider, config_path=settings.llm_options_path)
    LOGGER.info(
        "Upload pipeline configured: storage=%s, jobs=%s, flashcards=%s, provider=%s",
        settings.storage_backend,
        settings.job_store,
        settings.flashcard_store,
        provider.key,
    )
    return UploadOrchestrator(
        storage=build_storage(settings),
        loaders=default_registry(),
        chunker=TextChunker(settings.chunk_size, settings.chunk_overlap),
        generator=FlashcardGenerator(provider),
        repository=build_flashcard_repository(settings),
        tracker=tracker,
        settings=settings,
    )


@lru_cache(maxsize=1)
def get_status_tracker() -> StatusTracker:
    """FastAPI dependency returning the shared :class:`StatusTracker`."""

    settings = get_settings()
    if settings.job_store == "firestore":
        return StatusTracker(FirestoreJobStore(firestore_client(settings)))
    return StatusTracker(InMemoryJobStore())


@lru_cache(maxsize=1)
def get_upload_orchestrator() -> UploadOrchestrator:
    """FastAPI dependency returning the shared :class:`UploadOrchestrator`.

    Built on first use so a missing provider API key only fails upload
    requests, not the whole application.
    """

    return build_upload_orchestrator(get_settings(), get_status_tracker())


@lru_cache(maxsize=1)
def get_deck_service() -> DeckService:
    settings = get_settings()
    if settings.flashcard_store == "firestore":
        return DeckService(FirestoreDeckStore(firestore_client(settings)))
    return DeckService()
