"""Environment-driven service settings."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import FrozenSet, Optional

LOGGER = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

DEFAULT_ALLOWED_MIME_TYPES: FrozenSet[str] = frozenset(
    {
        PDF_MIME_TYPE,
        DOCX_MIME_TYPE,
        "text/plain",
        "text/csv",
        "image/png",
        "image/jpeg",
    }
)
DEFAULT_MAX_FILE_SIZE_BYTES = 25 * 1024 * 1024


def _env_str(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_optional(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        LOGGER.warning("Invalid integer for %s: %s; using default %s", name, value, default)
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        LOGGER.warning("Invalid float for %s: %s; using default %s", name, value, default)
        return default


def _env_set(name: str, default: FrozenSet[str]) -> FrozenSet[str]:
    value = os.getenv(name)
    if value is None:
        return default
    items = frozenset(item.strip() for item in value.split(",") if item.strip())
    return items or default


@dataclass(slots=True, frozen=True)
class Settings:
    data_dir: Path = Path("data")
    storage_backend: str = "local"
    job_store: str = "memory"
    flashcard_store: str = "memory"
    firebase_bucket: Optional[str] = None
    firebase_key_b64: Optional[str] = None
    firebase_key_path: Optional[str] = None

    allowed_mime_types: FrozenSet[str] = field(default_factory=lambda: DEFAULT_ALLOWED_MIME_TYPES)
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE_BYTES

    chunk_size: int = 1000
    chunk_overlap: int = 100

    llm_provider: Optional[str] = None
    llm_options_path: Optional[Path] = None
    flashcard_max_cards: int = 20
    flashcard_tone: str = "concise"
    llm_temperature: Optional[float] = None

    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""

        defaults = cls()
        options_path = _env_optional("LLM_OPTIONS_PATH")
        return cls(
            data_dir=Path(_env_str("STUDYHUB_DATA_DIR", str(defaults.data_dir))),
            storage_backend=_env_str("STORAGE_BACKEND", defaults.storage_backend).lower(),
            job_store=_env_str("JOB_STORE", defaults.job_store).lower(),
            flashcard_store=_env_str("FLASHCARD_STORE", defaults.flashcard_store).lower(),
            firebase_bucket=_env_optional("FIREBASE_BUCKET_NAME"),
            firebase_key_b64=_env_optional("FIREBASE_KEY_B64"),
            firebase_key_path=_env_optional("FIREBASE_KEY_PATH"),
            allowed_mime_types=_env_set("ALLOWED_MIME_TYPES", defaults.allowed_mime_types),
            max_file_size_bytes=_env_int("MAX_FILE_SIZE_BYTES", defaults.max_file_size_bytes),
            chunk_size=_env_int("CHUNK_SIZE", defaults.chunk_size),
            chunk_overlap=_env_int("CHUNK_OVERLAP", defaults.chunk_overlap),
            llm_provider=_env_optional("LLM_PROVIDER"),
            llm_options_path=Path(options_path) if options_path else None,
            flashcard_max_cards=_env_int("FLASHCARD_MAX_CARDS", defaults.flashcard_max_cards),
            flashcard_tone=_env_str("FLASHCARD_TONE", defaults.flashcard_tone).lower(),
            llm_temperature=_env_float("LLM_TEMPERATURE", defaults.llm_temperature),
            log_level=_env_str("LOG_LEVEL", defaults.log_level).upper(),
            log_dir=Path(_env_str("LOG_DIR", str(defaults.log_dir))),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings; ``get_settings.cache_clear()`` resets them."""

    return Settings.from_env()
