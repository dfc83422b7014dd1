"""Course decks accumulating flashcards across generation runs."""
from __future__ import annotations

import re
from typing import Any, Dict, Optional, Protocol, Sequence

from studyhub.models import utc_now_iso

_WHITESPACE_RE = re.compile(r"\s+")


def deck_id_for(course_code: str) -> str:
    """``"COSC 50"`` -> ``"COSC_50"``."""
    return _WHITESPACE_RE.sub("_", course_code.strip())


def merge_deck(
    existing: Optional[Dict[str, Any]],
    *,
    course_code: str,
    course_name: str,
    flashcards: Sequence[Dict[str, Any]],
    user_id: str,
    program_code: Optional[str] = None,
    program_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the deck after appending ``flashcards``, creating it when absent."""

    now = utc_now_iso()
    if existing is None:
        return {
            "id": deck_id_for(course_code),
            "courseCode": course_code,
            "courseName": course_name,
            "programCode": program_code or course_code.split(" ")[0],
            "programName": program_name or "",
            "flashcards": [dict(card) for card in flashcards],
            "totalCards": len(flashcards),
            "userId": user_id,
            "contributors": [user_id],
            "createdAt": now,
            "updatedAt": now,
        }

    deck = dict(existing)
    merged = list(deck.get("flashcards") or []) + [dict(card) for card in flashcards]
    contributors = list(deck.get("contributors") or [])
    if user_id not in contributors:
        contributors.append(user_id)
    deck.update(
        {
            "flashcards": merged,
            "totalCards": len(merged),
            "contributors": contributors,
            "updatedAt": now,
        }
    )
    return deck


class DeckStore(Protocol):
    def get(self, course_code: str) -> Optional[Dict[str, Any]]:
        ...

    def put(self, deck: Dict[str, Any]) -> None:
        ...


class InMemoryDeckStore:
    def __init__(self) -> None:
        self._decks: Dict[str, Dict[str, Any]] = {}

    def get(self, course_code: str) -> Optional[Dict[str, Any]]:
        deck = self._decks.get(deck_id_for(course_code))
        return dict(deck) if deck is not None else None

    def put(self, deck: Dict[str, Any]) -> None:
        self._decks[deck["id"]] = dict(deck)


class FirestoreDeckStore:
    def __init__(self, client: Any, collection: str = "decks") -> None:
        self._client = client
        self.collection = collection

    def get(self, course_code: str) -> Optional[Dict[str, Any]]:
        deck_id = deck_id_for(course_code)
        snapshot = self._client.collection(self.collection).document(deck_id).get()
        if not snapshot.exists:
            return None
        return {**(snapshot.to_dict() or {}), "id": deck_id}

    def put(self, deck: Dict[str, Any]) -> None:
        self._client.collection(self.collection).document(deck["id"]).set(deck)


class DeckService:
    """Read, merge into, and mark practice time on course decks."""

    def __init__(self, store: Optional[DeckStore] = None) -> None:
        self.store: DeckStore = store if store is not None else InMemoryDeckStore()

    def get(self, course_code: str) -> Optional[Dict[str, Any]]:
        return self.store.get(course_code)

    def merge(
        self,
        course_code: str,
        course_name: str,
        flashcards: Sequence[Dict[str, Any]],
        user_id: str = "anonymous",
        *,
        program_code: Optional[str] = None,
        program_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        deck = merge_deck(
            self.store.get(course_code),
            course_code=course_code,
            course_name=course_name,
            flashcards=flashcards,
            user_id=user_id,
            program_code=program_code,
            program_name=program_name,
        )
        self.store.put(deck)
        return deck

    def touch(self, course_code: str) -> Optional[Dict[str, Any]]:
        deck = self.store.get(course_code)
        if deck is None:
            return None
        deck["lastPracticed"] = utc_now_iso()
        self.store.put(deck)
        return deck
