"""Tolerant extraction of flashcards from raw LLM text."""
from __future__ import annotations

import json
from typing import Any, List, Optional, Sequence

from studyhub.errors import FlashcardParseError
from studyhub.models import DocumentChunk, Flashcard


def _string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [str(item) for item in value]


def _field(entry: dict, primary: str, alternate: str) -> str:
    value = entry.get(primary)
    if value is None:
        value = entry.get(alternate)
    return "" if value is None else str(value)


def parse_flashcards_response(
    raw: str,
    chunks: Sequence[DocumentChunk],
    max_cards: int,
) -> List[Flashcard]:
    """Parse the JSON array embedded in ``raw`` into at most ``max_cards`` cards.

    The payload is the text between the first ``[`` and the last ``]``, so
    prose or code fences around the array are ignored. Entries may use
    ``question``/``answer`` in place of ``front``/``back``. Cards without
    ``sourceChunkIds`` point at the chunk with the same position, if any.
    """

    trimmed = raw.strip()
    start = trimmed.find("[")
    end = trimmed.rfind("]")
    if start == -1 or end == -1 or end < start:
        raise FlashcardParseError("LLM response did not include JSON array")

    try:
        parsed = json.loads(trimmed[start : end + 1])
    except json.JSONDecodeError as error:
        raise FlashcardParseError("LLM response JSON parse failed", cause=error) from error
    if not isinstance(parsed, list):
        raise FlashcardParseError("LLM response malformed: expected array")

    flashcards: List[Flashcard] = []
    for index, entry in enumerate(parsed[: max(max_cards, 0)]):
        if not isinstance(entry, dict):
            entry = {}
        source_chunk_ids = _string_list(entry.get("sourceChunkIds"))
        if source_chunk_ids is None:
            source_chunk_ids = [chunk.chunk_id for chunk in chunks[index : index + 1]]
        flashcards.append(
            Flashcard(
                id=f"card_{index}",
                front=_field(entry, "front", "question"),
                back=_field(entry, "back", "answer"),
                tags=_string_list(entry.get("tags")),
                source_chunk_ids=source_chunk_ids,
            )
        )
    return flashcards
