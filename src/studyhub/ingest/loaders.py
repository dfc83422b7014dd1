"""Extraction strategies turning stored bytes into text documents."""
from __future__ import annotations

import io
import json
import logging
import xml.etree.ElementTree as ET
import zipfile
from typing import List, Protocol

from docx import Document as DocxDocument
from PyPDF2 import PdfReader

from studyhub.errors import DocumentLoadError
from studyhub.models import Document, UploadedFile

from .text import decode_text

LOGGER = logging.getLogger(__name__)

_WORD_NAMESPACE = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"


class DocumentLoader(Protocol):
    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        """Return the documents extracted from ``data``; ids may be left empty."""
        ...


class TextLoader:
    """Plain text passthrough."""

    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        return [Document(id="", page_content=decode_text(data))]


class CSVLoader:
    """CSV passthrough; records keep their line structure."""

    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        text = decode_text(data)
        rows = sum(1 for line in text.splitlines() if line.strip())
        return [Document(id="", page_content=text, metadata={"records": rows})]


class JSONLoader:
    """JSON passthrough, re-serialised with indentation when it parses."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        text = decode_text(data)
        try:
            text = json.dumps(json.loads(text), indent=self.indent, ensure_ascii=False)
        except json.JSONDecodeError:
            LOGGER.warning("Failed to parse JSON from %s; keeping raw text", file.name)
        return [Document(id="", page_content=text)]


class PDFLoader:
    """Extract text page by page with PyPDF2."""

    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        try:
            reader = PdfReader(io.BytesIO(data))
            pages = list(reader.pages)
        except Exception as error:
            raise DocumentLoadError(f"Failed to parse PDF {file.name}: {error}", cause=error) from error

        documents: List[Document] = []
        for number, page in enumerate(pages, start=1):
            try:
                text = page.extract_text() or ""
            except Exception as error:  # pragma: no cover - depends on the PDF backend
                LOGGER.warning("Failed to extract text from %s page %s: %s", file.name, number, error)
                text = ""
            if text.strip():
                documents.append(
                    Document(id="", page_content=text, metadata={"page": number, "pageCount": len(pages)})
                )

        if not documents:
            LOGGER.info("PDF %s has no extractable text (%s pages)", file.name, len(pages))
            documents.append(Document(id="", page_content="", metadata={"pageCount": len(pages)}))
        return documents


class DocxLoader:
    """Extract paragraphs from Word documents."""

    def load(self, file: UploadedFile, data: bytes) -> List[Document]:
        try:
            document = DocxDocument(io.BytesIO(data))
        except Exception as error:
            LOGGER.warning("python-docx failed to parse %s (%s); attempting fallback", file.name, error)
            return [Document(id="", page_content=self._fallback_extract(file, data))]

        paragraphs = [paragraph.text for paragraph in document.paragraphs if paragraph.text]
        return [Document(id="", page_content="\n\n".join(paragraphs))]

    @staticmethod
    def _fallback_extract(file: UploadedFile, data: bytes) -> str:
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                root = ET.fromstring(archive.read("word/document.xml"))
        except (zipfile.BadZipFile, KeyError, ET.ParseError) as error:
            raise DocumentLoadError(f"Failed to parse DOCX {file.name}: {error}", cause=error) from error

        paragraphs = []
        for paragraph in root.iter(f"{_WORD_NAMESPACE}p"):
            text = "".join(node.text or "" for node in paragraph.iter(f"{_WORD_NAMESPACE}t"))
            if text:
                paragraphs.append(text)
        return "\n\n".join(paragraphs)
