"""End-to-end orchestration of one upload-to-flashcards request."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from studyhub.config import Settings
from studyhub.errors import JobFailedError, UploadRejectedError
from studyhub.flashcards import FlashcardGenerator, FlashcardRepository, persist_flashcards
from studyhub.ingest import LoaderRegistry, TextChunker
from studyhub.jobs import JobStatus, StatusTracker
from studyhub.logging_config import audit
from studyhub.models import Flashcard, FlashcardOptions, GenerationMetadata, IncomingFile
from studyhub.storage import StorageService

LOGGER = logging.getLogger(__name__)

NON_FILE_ENTRY_ERROR = "Encountered non-file value in files payload"


@dataclass(slots=True)
class UploadResult:
    job_id: str
    flashcard_count: int
    chunk_count: int
    rejected_files: List[str] = field(default_factory=list)
    flashcards: List[Flashcard] = field(default_factory=list)


class UploadOrchestrator:
    """Validate a submission, then drive it through store, parse, chunk, generate, persist.

    Client errors raise :class:`UploadRejectedError` before a job exists. Once
    the job is queued, any failure moves it to ``failed`` and is re-raised as
    :class:`JobFailedError` carrying the job id.
    """

    def __init__(
        self,
        *,
        storage: StorageService,
        loaders: LoaderRegistry,
        chunker: TextChunker,
        generator: FlashcardGenerator,
        repository: FlashcardRepository,
        tracker: StatusTracker,
        settings: Settings,
        id_generator: Optional[Callable[[], str]] = None,
    ) -> None:
        self.storage = storage
        self.loaders = loaders
        self.chunker = chunker
        self.generator = generator
        self.repository = repository
        self.tracker = tracker
        self.settings = settings
        self._id_generator = id_generator

    def default_options(self) -> FlashcardOptions:
        return FlashcardOptions(
            max_cards=self.settings.flashcard_max_cards,
            tone=self.settings.flashcard_tone,
            temperature=self.settings.llm_temperature,
            provider_key=self.generator.provider_key,
        )

    def build_options(
        self,
        *,
        topic: Optional[str] = None,
        max_cards: Optional[int] = None,
        tone: Optional[str] = None,
    ) -> FlashcardOptions:
        overrides: Dict[str, Any] = {}
        if topic:
            overrides["topic"] = topic
        if max_cards is not None:
            overrides["max_cards"] = max_cards
        if tone:
            overrides["tone"] = tone.lower()
        try:
            return dataclasses.replace(self.default_options(), **overrides)
        except ValueError as error:
            raise UploadRejectedError("Invalid flashcard options", details=[str(error)]) from error

    def validate(self, entries: Sequence[object]) -> Tuple[List[IncomingFile], List[str]]:
        """Split submitted entries into acceptable files and per-file error messages."""

        if not entries:
            raise UploadRejectedError("No files provided")

        accepted: List[IncomingFile] = []
        errors: List[str] = []
        for entry in entries:
            if not isinstance(entry, IncomingFile):
                errors.append(NON_FILE_ENTRY_ERROR)
                continue
            if entry.mime_type not in self.settings.allowed_mime_types:
                errors.append(f"{entry.name} has unsupported type {entry.mime_type}")
                continue
            if entry.size > self.settings.max_file_size_bytes:
                errors.append(f"{entry.name} exceeds size limit")
                continue
            accepted.append(entry)

        if not accepted:
            raise UploadRejectedError("No valid files found", details=errors)
        return accepted, errors

    async def _set_status(self, job_id: str, status: JobStatus, payload: Dict[str, Any]) -> None:
        # Firestore-backed stores block on network I/O.
        await asyncio.to_thread(self.tracker.update_status, job_id, status, payload)

    def _new_job_id(self) -> str:
        if self._id_generator is not None:
            return self._id_generator()
        return uuid.uuid4().hex

    async def handle(
        self,
        entries: Sequence[object],
        *,
        user_id: str = "anonymous",
        topic: Optional[str] = None,
        options: Optional[FlashcardOptions] = None,
    ) -> UploadResult:
        files, rejected = self.validate(entries)
        if options is None:
            options = self.build_options(topic=topic)
        elif topic:
            options = dataclasses.replace(options, topic=topic)

        job_id = self._new_job_id()
        queued_payload: Dict[str, Any] = {"files": [upload.summary() for upload in files]}
        if rejected:
            queued_payload["rejected"] = list(rejected)
        try:
            await self._set_status(job_id, JobStatus.QUEUED, queued_payload)
        except Exception as error:
            message = str(error) or error.__class__.__name__
            LOGGER.exception("Could not queue job %s", job_id)
            raise JobFailedError(job_id, message, cause=error) from error
        LOGGER.info(
            "Upload received for job %s: %s file(s) from %s (%s rejected)",
            job_id,
            len(files),
            user_id,
            len(rejected),
        )

        started = time.perf_counter()
        try:
            uploaded = []
            for upload in files:
                uploaded.append(await self.storage.save_file(upload, user_id=user_id, job_id=job_id))
            await self._set_status(
                job_id, JobStatus.PARSING, {"files": [item.summary() for item in uploaded]}
            )

            documents = await asyncio.to_thread(
                self.loaders.load_documents, uploaded, self.storage.read_file
            )
            await self._set_status(job_id, JobStatus.GENERATING, {"documentCount": len(documents)})

            chunks = self.chunker.split_documents(documents)
            flashcards = await self.generator.generate(chunks, options)
            metadata = GenerationMetadata(
                job_id=job_id,
                files=[item.reference() for item in uploaded],
                options=options,
                provider_key=self.generator.provider_key,
            )
            await asyncio.to_thread(persist_flashcards, self.repository, user_id, flashcards, metadata)

            await self._set_status(
                job_id,
                JobStatus.COMPLETE,
                {"chunkCount": len(chunks), "flashcardCount": len(flashcards)},
            )
        except Exception as error:
            message = str(error) or error.__class__.__name__
            LOGGER.exception("Flashcard generation failed for job %s", job_id)
            try:
                await self._set_status(job_id, JobStatus.FAILED, {"error": message})
            except Exception:
                LOGGER.exception("Could not record failure for job %s", job_id)
            audit("job.failed", job_id=job_id, user_id=user_id, error=message)
            raise JobFailedError(job_id, message, cause=error) from error

        duration = time.perf_counter() - started
        audit(
            "job.complete",
            job_id=job_id,
            user_id=user_id,
            chunk_count=len(chunks),
            flashcard_count=len(flashcards),
            duration_seconds=round(duration, 3),
        )
        return UploadResult(
            job_id=job_id,
            flashcard_count=len(flashcards),
            chunk_count=len(chunks),
            rejected_files=list(rejected),
            flashcards=flashcards,
        )
