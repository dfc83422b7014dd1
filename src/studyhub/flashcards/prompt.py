"""Prompt construction for flashcard generation."""
from __future__ import annotations

import json
from typing import List, Sequence

from studyhub.models import DocumentChunk, FlashcardOptions

MAX_PROMPT_CHUNKS = 25
CHUNK_CHAR_BUDGET = 1600

FLASHCARD_SCHEMA = {
    "type": "object",
    "required": ["flashcards"],
    "properties": {
        "flashcards": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["front", "back"],
                "properties": {
                    "front": {"type": "string", "description": "Question or prompt shown first."},
                    "back": {"type": "string", "description": "Answer revealed on flip."},
                    "tags": {"type": "array", "items": {"type": "string"}},
                    "sourceChunkIds": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
    },
}

SYSTEM_INSTRUCTIONS = " ".join(
    (
        "You are a tutor that creates accurate study flashcards.",
        "Always respond with valid JSON that matches the provided schema.",
        "Do not include explanations outside the JSON structure.",
    )
)


def truncate(value: str, max_length: int) -> str:
    if len(value) <= max_length:
        return value
    return f"{value[: max_length - 3]}..."


def build_flashcard_prompt(chunks: Sequence[DocumentChunk], options: FlashcardOptions) -> str:
    """Compose the user prompt asking for up to ``options.max_cards`` cards."""

    excerpts: List[str] = [
        f"Chunk {chunk.chunk_index} (ID: {chunk.chunk_id})\n{truncate(chunk.page_content, CHUNK_CHAR_BUDGET)}\n"
        for chunk in list(chunks)[:MAX_PROMPT_CHUNKS]
    ]
    schema = json.dumps(FLASHCARD_SCHEMA, indent=2)
    return "\n".join(
        [
            "Generate high-quality flashcards from the supplied study material.",
            f"Topic: {options.topic}",
            f"Tone: {options.tone}",
            f"Return up to {options.max_cards} flashcards in JSON.",
            'Respond with a JSON object shaped like {"flashcards": [{"front": "...", "back": "...", "tags": ["..."]}]}.',
            f"The JSON response MUST conform to this schema:\n{schema}",
            "",
            "Source Chunks:",
            *excerpts,
        ]
    )
