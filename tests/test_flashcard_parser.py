from __future__ import annotations

import pytest

from studyhub.errors import FlashcardParseError
from studyhub.flashcards import parse_flashcards_response
from studyhub.models import DocumentChunk


def _chunks(count: int) -> list[DocumentChunk]:
    return [
        DocumentChunk(id="doc:0", page_content=f"chunk {index}", chunk_index=index, chunk_id=f"chunk-{index}")
        for index in range(count)
    ]


def test_plain_text_without_array_is_rejected() -> None:
    with pytest.raises(FlashcardParseError, match="did not include JSON array"):
        parse_flashcards_response("not json", _chunks(1), 5)


def test_array_is_extracted_from_surrounding_prose() -> None:
    raw = 'Sure! [{"front":"Q1","back":"A1"}] Hope that helps!'

    cards = parse_flashcards_response(raw, _chunks(1), 5)

    assert len(cards) == 1
    assert cards[0].front == "Q1"
    assert cards[0].back == "A1"
    assert cards[0].id == "card_0"


def test_code_fenced_array_is_accepted() -> None:
    raw = '```json\n[{"front": "What is ATP?", "back": "Energy currency", "tags": ["bio"]}]\n```'

    cards = parse_flashcards_response(raw, _chunks(1), 5)

    assert cards[0].tags == ["bio"]


def test_invalid_json_between_brackets_is_rejected() -> None:
    with pytest.raises(FlashcardParseError, match="JSON parse failed") as info:
        parse_flashcards_response('[{"front": "Q1",}]', _chunks(1), 5)

    assert info.value.__cause__ is not None


def test_brackets_in_wrong_order_are_rejected() -> None:
    with pytest.raises(FlashcardParseError, match="did not include JSON array"):
        parse_flashcards_response("] nothing here [", _chunks(1), 5)


def test_question_and_answer_aliases() -> None:
    raw = '[{"question": "Capital of France?", "answer": "Paris"}, {"front": "", "back": null}]'

    cards = parse_flashcards_response(raw, _chunks(2), 5)

    assert (cards[0].front, cards[0].back) == ("Capital of France?", "Paris")
    assert (cards[1].front, cards[1].back) == ("", "")
    assert cards[1].is_low_quality


def test_output_is_truncated_to_max_cards() -> None:
    raw = "[" + ",".join(f'{{"front": "Q{i}", "back": "A{i}"}}' for i in range(10)) + "]"

    cards = parse_flashcards_response(raw, _chunks(10), 3)

    assert [card.id for card in cards] == ["card_0", "card_1", "card_2"]


def test_source_chunk_ids_fall_back_to_positional_chunk() -> None:
    raw = (
        '[{"front": "Q0", "back": "A0"},'
        ' {"front": "Q1", "back": "A1", "sourceChunkIds": ["explicit"]},'
        ' {"front": "Q2", "back": "A2"}]'
    )

    cards = parse_flashcards_response(raw, _chunks(2), 5)

    assert cards[0].source_chunk_ids == ["chunk-0"]
    assert cards[1].source_chunk_ids == ["explicit"]
    assert cards[2].source_chunk_ids == []


def test_non_object_entries_become_empty_cards() -> None:
    cards = parse_flashcards_response('["just a string"]', _chunks(1), 5)

    assert cards[0].front == ""
    assert cards[0].is_low_quality
