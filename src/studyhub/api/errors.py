"""JSON error bodies shared by every route."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from studyhub.errors import StudyHubError

LOGGER = logging.getLogger(__name__)

_DEFAULT_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


def error_response(status_code: int, error: str, **extra: Any) -> JSONResponse:
    body = {"error": error}
    body.update({key: value for key, value in extra.items() if value is not None})
    return JSONResponse(status_code=status_code, content=body)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = _DEFAULT_MESSAGES.get(exc.status_code, str(exc.detail))
    if exc.detail and exc.detail not in ("Not Found", "Method Not Allowed"):
        message = str(exc.detail)
    return error_response(exc.status_code, message)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for item in exc.errors():
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "body")
        details.append(f"{location}: {item.get('msg')}" if location else str(item.get("msg")))
    LOGGER.info("Rejected request to %s: %s", request.url.path, details)
    return error_response(400, "Invalid request payload", details=details)


async def _service_error_handler(request: Request, exc: StudyHubError) -> JSONResponse:
    LOGGER.error("Unhandled service error on %s: %s", request.url.path, exc)
    return error_response(500, str(exc))


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return error_response(500, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StudyHubError, _service_error_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
