import logging

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from studyhub.api.decks import router as decks_router
from studyhub.api.errors import install_error_handlers
from studyhub.api.jobs import router as jobs_router
from studyhub.api.uploads import router as uploads_router
from studyhub.config import get_settings
from studyhub.logging_config import configure_logging

_settings = get_settings()
configure_logging(_settings.log_level, _settings.log_dir)

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="StudyHub API")
install_error_handlers(app)
app.include_router(uploads_router)
app.include_router(jobs_router)
app.include_router(decks_router)


@app.get("/healthz", response_class=PlainTextResponse)
def healthcheck() -> str:
    """Liveness probe used by container orchestrators."""
    return "ok"
