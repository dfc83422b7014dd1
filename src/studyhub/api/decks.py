"""Course deck endpoints."""
from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from studyhub.flashcards import DeckService
from studyhub.services.dependencies import get_deck_service

router = APIRouter(prefix="/api", tags=["decks"])


class DeckMergeRequest(BaseModel):
    """Flashcards to append to a course deck, creating it when needed."""

    course_code: str = Field(..., alias="courseCode", min_length=1)
    course_name: str = Field(..., alias="courseName", min_length=1)
    flashcards: list[dict[str, Any]] = Field(..., min_length=1)
    user_id: str = Field("anonymous", alias="userId")
    program_code: Optional[str] = Field(None, alias="programCode")
    program_name: Optional[str] = Field(None, alias="programName")


class DeckTouchRequest(BaseModel):
    course_code: str = Field(..., alias="courseCode", min_length=1)


class DeckResponse(BaseModel):
    status: str
    exists: bool
    deck: Optional[dict[str, Any]]


@router.get("/decks", response_model=DeckResponse)
def get_deck(
    courseCode: Optional[str] = None,
    decks: DeckService = Depends(get_deck_service),
) -> DeckResponse:
    """Return the deck for ``courseCode`` or ``exists: false``."""

    if not courseCode:
        raise HTTPException(status_code=400, detail="courseCode is required")
    deck = decks.get(courseCode)
    return DeckResponse(status="success", exists=deck is not None, deck=deck)


@router.post("/decks", response_model=DeckResponse)
def merge_deck(request: DeckMergeRequest, decks: DeckService = Depends(get_deck_service)) -> DeckResponse:
    deck = decks.merge(
        request.course_code,
        request.course_name,
        request.flashcards,
        request.user_id,
        program_code=request.program_code,
        program_name=request.program_name,
    )
    return DeckResponse(status="success", exists=True, deck=deck)


@router.patch("/decks", response_model=DeckResponse)
def touch_deck(request: DeckTouchRequest, decks: DeckService = Depends(get_deck_service)) -> DeckResponse:
    """Record that the deck was just practised."""

    deck = decks.touch(request.course_code)
    if deck is None:
        raise HTTPException(status_code=404, detail=f"Deck {request.course_code} not found")
    return DeckResponse(status="success", exists=True, deck=deck)
