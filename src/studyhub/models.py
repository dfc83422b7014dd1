"""Data models flowing through the upload-to-flashcards pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

TONES = ("concise", "detailed", "beginner", "advanced")


def utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class IncomingFile:
    """A raw file taken from the multipart payload, before it is stored."""

    name: str
    mime_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)

    def summary(self) -> Dict[str, Any]:
        return {"id": "inline", "name": self.name, "size": self.size, "mimeType": self.mime_type}


@dataclass(slots=True, frozen=True)
class UploadedFile:
    """Reference to one submitted binary persisted by a storage service."""

    id: str
    user_id: str
    job_id: str
    name: str
    size: int
    mime_type: str
    uri: str
    checksum: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    def summary(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "size": self.size, "mimeType": self.mime_type}

    def reference(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "uri": self.uri}


@dataclass(slots=True)
class Document:
    """Normalised text extracted from one source unit."""

    id: str
    page_content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class DocumentChunk(Document):
    """A bounded slice of a document's text."""

    chunk_index: int = 0
    chunk_id: str = ""


@dataclass(slots=True)
class Flashcard:
    id: str
    front: str
    back: str
    tags: Optional[List[str]] = None
    source_chunk_ids: Optional[List[str]] = None

    @property
    def is_low_quality(self) -> bool:
        return not self.front.strip() or not self.back.strip()

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"id": self.id, "front": self.front, "back": self.back}
        if self.tags is not None:
            payload["tags"] = list(self.tags)
        if self.source_chunk_ids is not None:
            payload["sourceChunkIds"] = list(self.source_chunk_ids)
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Flashcard":
        tags = data.get("tags")
        source_chunk_ids = data.get("sourceChunkIds")
        return cls(
            id=str(data.get("id", "")),
            front=str(data.get("front", "")),
            back=str(data.get("back", "")),
            tags=[str(tag) for tag in tags] if isinstance(tags, list) else None,
            source_chunk_ids=[str(item) for item in source_chunk_ids]
            if isinstance(source_chunk_ids, list)
            else None,
        )


@dataclass(slots=True)
class FlashcardOptions:
    topic: str = "Study Material"
    tone: str = "concise"
    max_cards: int = 20
    temperature: Optional[float] = None
    provider_key: Optional[str] = None

    def __post_init__(self) -> None:
        if self.tone not in TONES:
            raise ValueError(f"tone must be one of {', '.join(TONES)}; got {self.tone!r}")
        if self.max_cards <= 0:
            raise ValueError("max_cards must be a positive integer")

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "topic": self.topic,
            "tone": self.tone,
            "maxCards": self.max_cards,
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        if self.provider_key:
            payload["providerKey"] = self.provider_key
        return payload


@dataclass(slots=True)
class GenerationMetadata:
    """Audit record for a single generation run."""

    job_id: str
    files: List[Dict[str, Any]]
    options: FlashcardOptions
    created_at: str = field(default_factory=utc_now_iso)
    provider_key: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "files": [dict(item) for item in self.files],
            "options": self.options.to_dict(),
            "createdAt": self.created_at,
            "providerKey": self.provider_key,
        }
