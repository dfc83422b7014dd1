"""Flashcard prompting, parsing, generation and persistence."""

from .decks import DeckService, FirestoreDeckStore, InMemoryDeckStore, deck_id_for
from .generator import FlashcardGenerator
from .parser import parse_flashcards_response
from .prompt import SYSTEM_INSTRUCTIONS, build_flashcard_prompt
from .repository import (
    FirestoreFlashcardRepository,
    FlashcardRepository,
    InMemoryFlashcardRepository,
    persist_flashcards,
)

__all__ = [
    "DeckService",
    "FirestoreDeckStore",
    "FirestoreFlashcardRepository",
    "FlashcardGenerator",
    "FlashcardRepository",
    "InMemoryDeckStore",
    "InMemoryFlashcardRepository",
    "SYSTEM_INSTRUCTIONS",
    "build_flashcard_prompt",
    "deck_id_for",
    "parse_flashcards_response",
    "persist_flashcards",
]
