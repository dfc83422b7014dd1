"""Text decoding, normalisation and language tagging helpers."""
from __future__ import annotations

import logging
import re
import unicodedata
from typing import Optional

from langdetect import DetectorFactory, LangDetectException, detect

LOGGER = logging.getLogger(__name__)
DetectorFactory.seed = 0

_WHITESPACE_RE = re.compile(r"[ \t]+")
_MULTIPLE_NEWLINES_RE = re.compile(r"\n{3,}")
_TRAILING_SPACE_RE = re.compile(r"[ \t]+\n")

_UTF16_BOMS = (b"\xff\xfe", b"\xfe\xff")


def decode_text(data: bytes) -> str:
    """Decode bytes as UTF-8 (or BOM-marked UTF-16), falling back to latin-1."""

    if data.startswith(_UTF16_BOMS):
        try:
            return data.decode("utf-16")
        except UnicodeDecodeError:
            LOGGER.warning("UTF-16 byte order mark present but payload is not valid UTF-16")
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def normalize_text(text: str) -> str:
    """Normalise whitespace and Unicode representation."""

    normalized = unicodedata.normalize("NFC", text)
    normalized = normalized.replace("\r\n", "\n").replace("\r", "\n")
    normalized = _WHITESPACE_RE.sub(" ", normalized)
    normalized = _TRAILING_SPACE_RE.sub("\n", normalized)
    normalized = _MULTIPLE_NEWLINES_RE.sub("\n\n", normalized)
    return normalized.strip()


def detect_language(text: str) -> Optional[str]:
    cleaned = text.strip()
    if not cleaned:
        return None
    try:
        return detect(cleaned)
    except LangDetectException:
        LOGGER.info("Unable to determine language for text of length %s", len(text))
        return None
