"""Persistence of generated flashcards and their generation metadata."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Protocol, Sequence

from studyhub.models import Flashcard, GenerationMetadata

LOGGER = logging.getLogger(__name__)


class FlashcardRepository(Protocol):
    def save_flashcards(
        self, user_id: str, flashcards: Sequence[Flashcard], metadata: GenerationMetadata
    ) -> None:
        ...

    def load_flashcards(self, job_id: str) -> List[Flashcard]:
        ...


def _flashcard_set(user_id: str, flashcards: Sequence[Flashcard], metadata: GenerationMetadata) -> Dict[str, Any]:
    return {
        "userId": user_id,
        "jobId": metadata.job_id,
        "flashcards": [card.to_dict() for card in flashcards],
        "totalCards": len(flashcards),
        "metadata": metadata.to_dict(),
    }


class InMemoryFlashcardRepository:
    def __init__(self) -> None:
        self.sets: Dict[str, Dict[str, Any]] = {}

    def save_flashcards(
        self, user_id: str, flashcards: Sequence[Flashcard], metadata: GenerationMetadata
    ) -> None:
        self.sets[metadata.job_id] = _flashcard_set(user_id, flashcards, metadata)

    def load_flashcards(self, job_id: str) -> List[Flashcard]:
        stored = self.sets.get(job_id)
        if stored is None:
            return []
        return [Flashcard.from_dict(item) for item in stored["flashcards"]]


class FirestoreFlashcardRepository:
    """Stores one document per job in the ``flashcardSets`` collection."""

    def __init__(self, client: Any, collection: str = "flashcardSets") -> None:
        self._client = client
        self.collection = collection

    def save_flashcards(
        self, user_id: str, flashcards: Sequence[Flashcard], metadata: GenerationMetadata
    ) -> None:
        document = self._client.collection(self.collection).document(metadata.job_id)
        document.set(_flashcard_set(user_id, flashcards, metadata))
        LOGGER.info("Saved %s flashcards for job %s to Firestore", len(flashcards), metadata.job_id)

    def load_flashcards(self, job_id: str) -> List[Flashcard]:
        snapshot = self._client.collection(self.collection).document(job_id).get()
        if not snapshot.exists:
            return []
        data = snapshot.to_dict() or {}
        return [Flashcard.from_dict(item) for item in data.get("flashcards") or []]


def persist_flashcards(
    repository: FlashcardRepository,
    user_id: str,
    flashcards: Sequence[Flashcard],
    metadata: GenerationMetadata,
) -> bool:
    """Save ``flashcards`` unless there are none; return whether anything was written."""

    if not flashcards:
        LOGGER.info("No flashcards generated for job %s; nothing to persist", metadata.job_id)
        return False
    repository.save_flashcards(user_id, flashcards, metadata)
    return True
