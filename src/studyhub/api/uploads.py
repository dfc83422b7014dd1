"""Upload endpoint turning multipart study material into flashcards."""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from studyhub.errors import JobFailedError, UploadRejectedError
from studyhub.models import IncomingFile
from studyhub.services import UploadOrchestrator
from studyhub.services.dependencies import get_upload_orchestrator

from .errors import error_response

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["uploads"])

SUCCESS_MESSAGE = "Flashcards generated successfully"


def _form_value(value: object) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _parse_max_cards(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as exc:
        raise UploadRejectedError("Invalid flashcard options", details=[f"maxCards must be an integer, got {value}"]) from exc


async def _read_entries(values: List[object], max_bytes: int) -> List[object]:
    """Read uploaded parts, never buffering more than ``max_bytes + 1`` bytes of each.

    An oversized part keeps one byte past the limit so validation rejects it.
    """

    entries: List[object] = []
    for value in values:
        if isinstance(value, UploadFile):
            data = await value.read(max_bytes + 1)
            entries.append(
                IncomingFile(
                    name=value.filename or "upload",
                    mime_type=value.content_type or "application/octet-stream",
                    data=data,
                )
            )
        else:
            entries.append(value)
    return entries


@router.post("/uploads")
async def create_upload(
    request: Request,
    orchestrator: UploadOrchestrator = Depends(get_upload_orchestrator),
) -> JSONResponse:
    """Store the submitted files and generate flashcards from them."""

    content_type = request.headers.get("content-type", "")
    if not content_type.lower().startswith("multipart/form-data"):
        return error_response(400, "Invalid request payload")

    try:
        form = await request.form()
    except (MultiPartException, StarletteHTTPException) as exc:
        LOGGER.info("Could not parse multipart payload: %s", exc)
        return error_response(400, "Invalid request payload")

    try:
        entries = await _read_entries(form.getlist("files"), orchestrator.settings.max_file_size_bytes)
        options = orchestrator.build_options(
            topic=_form_value(form.get("topic")),
            max_cards=_parse_max_cards(_form_value(form.get("maxCards"))),
            tone=_form_value(form.get("tone")),
        )
        result = await orchestrator.handle(
            entries,
            user_id=_form_value(form.get("userId")) or "anonymous",
            options=options,
        )
    except UploadRejectedError as exc:
        return error_response(400, str(exc), details=exc.details or None)
    except JobFailedError as exc:
        return error_response(500, "Failed to process documents", details=str(exc), jobId=exc.job_id)
    finally:
        await form.close()

    return JSONResponse(
        {
            "jobId": result.job_id,
            "flashcardCount": result.flashcard_count,
            "chunkCount": result.chunk_count,
            "message": SUCCESS_MESSAGE,
            "rejected": result.rejected_files,
        }
    )
