"""Flashcard generation from document chunks."""
from __future__ import annotations

import logging
import time
from typing import List, Sequence

from studyhub.llm import LLMProvider
from studyhub.models import DocumentChunk, Flashcard, FlashcardOptions

from .parser import parse_flashcards_response
from .prompt import SYSTEM_INSTRUCTIONS, build_flashcard_prompt

LOGGER = logging.getLogger(__name__)


class FlashcardGenerator:
    """Prompt one LLM provider with chunk excerpts and parse its answer."""

    def __init__(self, provider: LLMProvider) -> None:
        self.provider = provider

    @property
    def provider_key(self) -> str:
        return self.provider.key

    async def generate(self, chunks: Sequence[DocumentChunk], options: FlashcardOptions) -> List[Flashcard]:
        if not chunks:
            return []

        prompt = build_flashcard_prompt(chunks, options)
        started = time.perf_counter()
        raw = await self.provider.invoke(prompt, system=SYSTEM_INSTRUCTIONS, temperature=options.temperature)
        flashcards = parse_flashcards_response(raw, chunks, options.max_cards)

        low_quality = sum(1 for card in flashcards if card.is_low_quality)
        if low_quality:
            LOGGER.warning("%s of %s generated flashcards have an empty side", low_quality, len(flashcards))
        LOGGER.info(
            "Generated %s flashcards from %s chunks with %s in %.3fs",
            len(flashcards),
            len(chunks),
            self.provider.key,
            time.perf_counter() - started,
        )
        return flashcards
