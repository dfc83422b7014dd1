"""Boundary-aware splitting of documents into overlapping chunks."""
from __future__ import annotations

import logging
import re
import uuid
from typing import Dict, Iterable, Iterator, List, Tuple

from studyhub.models import Document, DocumentChunk

_SENTENCE_RE = re.compile(r"(.+?(?:[.!?](?=\s)|$))", re.DOTALL)
LOGGER = logging.getLogger(__name__)


class TextChunker:
    """Split document text into chunks respecting semantic boundaries.

    A chunk ends at the last paragraph break in its window, else the last
    sentence end, else the last space, else a hard cut at ``chunk_size``.
    Output depends only on the input documents and the configuration.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 100) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be a positive integer")
        if chunk_overlap < 0:
            raise ValueError("chunk_overlap must be a non-negative integer")
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split_documents(self, documents: Iterable[Document]) -> List[DocumentChunk]:
        chunks: List[DocumentChunk] = []
        next_index: Dict[str, int] = {}
        for document in documents:
            source_id = str(document.metadata.get("sourceFileId") or document.id)
            for text, start, end in self._chunk_text(document.page_content):
                chunk_index = next_index.get(source_id, 0)
                next_index[source_id] = chunk_index + 1
                metadata = dict(document.metadata)
                metadata.update({"documentId": document.id, "charStart": start, "charEnd": end})
                chunks.append(
                    DocumentChunk(
                        id=document.id,
                        page_content=text,
                        metadata=metadata,
                        chunk_index=chunk_index,
                        chunk_id=self._make_chunk_id(source_id, chunk_index, start, end),
                    )
                )
        LOGGER.debug("Split %s source file(s) into %s chunks", len(next_index), len(chunks))
        return chunks

    @staticmethod
    def _make_chunk_id(source_id: str, chunk_index: int, start: int, end: int) -> str:
        seed = f"{source_id}:{chunk_index}:{start}:{end}"
        return uuid.uuid5(uuid.NAMESPACE_URL, seed).hex

    def _chunk_text(self, text: str) -> Iterator[Tuple[str, int, int]]:
        if not text:
            return
        text_length = len(text)
        start = 0
        while start < text_length:
            tentative_end = min(start + self.chunk_size, text_length)
            chunk_end = self._find_semantic_break(text, start, tentative_end)
            if chunk_end <= start:
                chunk_end = tentative_end
            raw_chunk = text[start:chunk_end]
            if not raw_chunk.strip():
                start = chunk_end
                continue
            final_start = start + (len(raw_chunk) - len(raw_chunk.lstrip()))
            final_end = chunk_end - (len(raw_chunk) - len(raw_chunk.rstrip()))
            yield text[final_start:final_end], final_start, final_end
            if final_end >= text_length:
                break
            next_start = final_end - self.chunk_overlap
            if next_start <= final_start:
                next_start = final_end
            start = next_start

    def _find_semantic_break(self, text: str, start: int, tentative_end: int) -> int:
        if tentative_end >= len(text):
            return len(text)
        segment = text[start:tentative_end]
        paragraph_break = segment.rfind("\n\n")
        if paragraph_break != -1 and paragraph_break >= self.chunk_size // 3:
            return start + paragraph_break + 2
        sentence_break = self._find_sentence_break(segment)
        if sentence_break is not None and sentence_break >= self.chunk_size // 4:
            return start + sentence_break
        word_break = segment.rfind(" ")
        if word_break != -1 and word_break >= self.chunk_size // 4:
            return start + word_break
        return tentative_end

    @staticmethod
    def _find_sentence_break(segment: str) -> int | None:
        ends = [match.end() for match in _SENTENCE_RE.finditer(segment)]
        # The last match always reaches the end of the window; it is only a
        # sentence end when the window itself ends on punctuation.
        if ends and not segment.rstrip().endswith((".", "!", "?")):
            ends.pop()
        return ends[-1] if ends else None
