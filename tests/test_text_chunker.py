import random
import string

import pytest

from studyhub.ingest import TextChunker
from studyhub.models import Document


def generate_text(words: int = 200) -> str:
    random.seed(42)
    alphabet = string.ascii_letters + "абвгдежзийклмнопрстуфхцчшщъьюя"
    tokens = []
    for _ in range(words):
        length = random.randint(3, 12)
        tokens.append("".join(random.choice(alphabet) for _ in range(length)))
    return " ".join(tokens)


def _document(text: str, source: str = "file-1", index: int = 0) -> Document:
    return Document(id=f"{source}:{index}", page_content=text, metadata={"sourceFileId": source})


def test_short_document_yields_single_chunk() -> None:
    text = "Cells are the basic unit of life in all organisms."
    assert len(text) == 50

    chunks = TextChunker(chunk_size=1000, chunk_overlap=100).split_documents([_document(text)])

    assert len(chunks) == 1
    assert chunks[0].page_content == text
    assert chunks[0].chunk_index == 0
    assert chunks[0].metadata["charStart"] == 0
    assert chunks[0].metadata["charEnd"] == 50


def test_chunks_cover_entire_input() -> None:
    text = generate_text(120)
    chunks = TextChunker(chunk_size=80, chunk_overlap=15).split_documents([_document(text)])

    assert chunks, "Expected at least one chunk"
    assert chunks[0].metadata["charStart"] == 0
    assert chunks[-1].metadata["charEnd"] == len(text)

    coverage = [False] * len(text)
    previous_end = 0
    for chunk in chunks:
        start = chunk.metadata["charStart"]
        end = chunk.metadata["charEnd"]
        assert 0 <= start < end <= len(text)
        assert end - start <= 80
        assert start <= previous_end
        assert text[start:end] == chunk.page_content
        for index in range(start, end):
            coverage[index] = True
        previous_end = end

    # Only the separating spaces may fall between chunks.
    assert all(covered or text[index] == " " for index, covered in enumerate(coverage))


def test_chunks_respect_overlap_boundaries() -> None:
    text = generate_text(80)
    chunks = TextChunker(chunk_size=60, chunk_overlap=10).split_documents([_document(text)])

    for current, nxt in zip(chunks, chunks[1:]):
        assert current.metadata["charEnd"] - nxt.metadata["charStart"] <= 10
        assert nxt.metadata["charStart"] > current.metadata["charStart"]


def test_prefers_paragraph_then_sentence_breaks() -> None:
    first = "Osmosis moves water across membranes. " * 3
    second = "Diffusion spreads particles evenly."
    text = f"{first.strip()}\n\n{second}"

    chunks = TextChunker(chunk_size=140, chunk_overlap=0).split_documents([_document(text)])

    assert chunks[0].page_content == first.strip()
    assert chunks[1].page_content == second


def test_hard_cut_without_any_boundary() -> None:
    text = "x" * 250

    chunks = TextChunker(chunk_size=100, chunk_overlap=0).split_documents([_document(text)])

    assert [len(chunk.page_content) for chunk in chunks] == [100, 100, 50]


def test_chunking_is_deterministic() -> None:
    documents = [_document(generate_text(150))]
    chunker = TextChunker(chunk_size=120, chunk_overlap=20)

    first = chunker.split_documents(documents)
    second = chunker.split_documents(documents)

    assert [chunk.chunk_id for chunk in first] == [chunk.chunk_id for chunk in second]
    assert len({chunk.chunk_id for chunk in first}) == len(first)


def test_indices_are_contiguous_per_source_file() -> None:
    documents = [
        _document(generate_text(40), source="file-a", index=0),
        _document(generate_text(40), source="file-a", index=1),
        _document(generate_text(40), source="file-b", index=0),
    ]

    chunks = TextChunker(chunk_size=100, chunk_overlap=10).split_documents(documents)

    for source in ("file-a", "file-b"):
        indices = [chunk.chunk_index for chunk in chunks if chunk.metadata["sourceFileId"] == source]
        assert indices == list(range(len(indices)))
    assert {chunk.metadata["documentId"] for chunk in chunks} == {"file-a:0", "file-a:1", "file-b:0"}


def test_empty_documents_produce_no_chunks() -> None:
    assert TextChunker().split_documents([_document(""), _document("   \n\n ")]) == []


@pytest.mark.parametrize(
    ("size", "overlap"),
    [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
)
def test_invalid_configuration_is_rejected(size: int, overlap: int) -> None:
    with pytest.raises(ValueError):
        TextChunker(chunk_size=size, chunk_overlap=overlap)
