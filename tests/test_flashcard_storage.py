"""Flashcard repositories and course decks."""
from __future__ import annotations

from studyhub.flashcards import (
    DeckService,
    FirestoreDeckStore,
    FirestoreFlashcardRepository,
    InMemoryFlashcardRepository,
    deck_id_for,
    persist_flashcards,
)
from studyhub.models import Flashcard, FlashcardOptions, GenerationMetadata


def _metadata(job_id: str = "job-1") -> GenerationMetadata:
    return GenerationMetadata(
        job_id=job_id,
        files=[{"id": "f1", "name": "notes.txt", "uri": "file:///tmp/notes.txt"}],
        options=FlashcardOptions(topic="Biology", max_cards=5),
        provider_key="mock",
    )


def _cards() -> list[Flashcard]:
    return [
        Flashcard(id="card_0", front="What is ATP?", back="Energy currency", tags=["bio"], source_chunk_ids=["c0"]),
        Flashcard(id="card_1", front="What is DNA?", back="Genetic material"),
    ]


def test_in_memory_repository_round_trip() -> None:
    repository = InMemoryFlashcardRepository()

    assert persist_flashcards(repository, "user-1", _cards(), _metadata()) is True

    assert repository.load_flashcards("job-1") == _cards()
    stored = repository.sets["job-1"]
    assert stored["userId"] == "user-1"
    assert stored["totalCards"] == 2
    assert stored["metadata"]["options"] == {"topic": "Biology", "tone": "concise", "maxCards": 5}
    assert repository.load_flashcards("unknown") == []


def test_empty_results_are_not_persisted() -> None:
    repository = InMemoryFlashcardRepository()

    assert persist_flashcards(repository, "user-1", [], _metadata()) is False
    assert repository.sets == {}


def test_firestore_repository_writes_one_document_per_job(firestore) -> None:
    repository = FirestoreFlashcardRepository(firestore)

    repository.save_flashcards("user-1", _cards(), _metadata("job-9"))

    document = firestore.collections["flashcardSets"]["job-9"]
    assert document["flashcards"][0]["sourceChunkIds"] == ["c0"]
    assert document["metadata"]["providerKey"] == "mock"
    assert repository.load_flashcards("job-9") == _cards()


def test_deck_id_replaces_whitespace() -> None:
    assert deck_id_for(" COSC  50 ") == "COSC_50"


def test_deck_merge_creates_then_appends() -> None:
    decks = DeckService()

    created = decks.merge("COSC 50", "Software Design", [{"front": "Q1", "back": "A1"}], "alice")
    assert created["id"] == "COSC_50"
    assert created["programCode"] == "COSC"
    assert created["totalCards"] == 1
    assert created["contributors"] == ["alice"]

    merged = decks.merge("COSC 50", "Software Design", [{"front": "Q2", "back": "A2"}], "bob")
    assert merged["totalCards"] == 2
    assert [card["front"] for card in merged["flashcards"]] == ["Q1", "Q2"]
    assert merged["contributors"] == ["alice", "bob"]
    assert merged["createdAt"] == created["createdAt"]


def test_touch_records_last_practice() -> None:
    decks = DeckService()

    assert decks.touch("BIO 1") is None

    decks.merge("BIO 1", "Intro Biology", [{"front": "Q", "back": "A"}])
    touched = decks.touch("BIO 1")

    assert touched is not None
    assert "lastPracticed" in decks.get("BIO 1")


def test_firestore_deck_store(firestore) -> None:
    decks = DeckService(FirestoreDeckStore(firestore))

    decks.merge("MATH 8", "Calculus", [{"front": "d/dx x^2", "back": "2x"}], "carol", program_name="Mathematics")

    stored = firestore.collections["decks"]["MATH_8"]
    assert stored["programName"] == "Mathematics"
    assert decks.get("MATH 8")["totalCards"] == 1
