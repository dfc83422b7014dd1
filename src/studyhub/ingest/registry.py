"""Media-type keyed registry of document loaders."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional

from studyhub.config import DOCX_MIME_TYPE, PDF_MIME_TYPE
from studyhub.errors import NoLoaderRegisteredError
from studyhub.models import Document, UploadedFile

from .loaders import CSVLoader, DocumentLoader, DocxLoader, JSONLoader, PDFLoader, TextLoader
from .text import detect_language, normalize_text

LOGGER = logging.getLogger(__name__)

FileFetcher = Callable[[UploadedFile], bytes]


def _media_type_key(media_type: str) -> str:
    # "text/plain; charset=utf-8" -> "text/plain"
    return media_type.split(";", 1)[0].strip().lower()


class LoaderRegistry:
    """Selects an extraction strategy per file and decorates its output.

    Source keys (``sourceFileId``, ``sourceFileName``, ``mediaType``) always
    override loader-supplied metadata of the same name.
    """

    def __init__(self, *, detect_languages: bool = True) -> None:
        self._loaders: Dict[str, DocumentLoader] = {}
        self.detect_languages = detect_languages

    def register(self, media_type: str, loader: DocumentLoader) -> None:
        self._loaders[_media_type_key(media_type)] = loader

    @property
    def media_types(self) -> List[str]:
        return sorted(self._loaders)

    def loader_for(self, file: UploadedFile) -> Optional[DocumentLoader]:
        return self._loaders.get(_media_type_key(file.mime_type))

    def load_documents(self, files: Iterable[UploadedFile], fetch: FileFetcher) -> List[Document]:
        files = list(files)
        loaders = []
        for file in files:
            loader = self.loader_for(file)
            if loader is None:
                raise NoLoaderRegisteredError(file.mime_type)
            loaders.append(loader)

        documents: List[Document] = []
        for file, loader in zip(files, loaders):
            loaded = loader.load(file, fetch(file))
            for index, raw in enumerate(loaded):
                documents.append(self._decorate(file, index, raw))
            LOGGER.info("Loaded %s document(s) from %s (%s)", len(loaded), file.name, file.mime_type)
        return documents

    def _decorate(self, file: UploadedFile, index: int, raw: Document) -> Document:
        text = normalize_text(raw.page_content)
        metadata = dict(raw.metadata)
        if self.detect_languages and "language" not in metadata:
            language = detect_language(text)
            if language:
                metadata["language"] = language
        metadata.update(
            {
                "sourceFileId": file.id,
                "sourceFileName": file.name,
                "mediaType": file.mime_type,
            }
        )
        return Document(id=raw.id or f"{file.id}:{index}", page_content=text, metadata=metadata)


def default_registry(*, detect_languages: bool = True) -> LoaderRegistry:
    registry = LoaderRegistry(detect_languages=detect_languages)
    registry.register("text/plain", TextLoader())
    registry.register("text/markdown", TextLoader())
    registry.register("text/csv", CSVLoader())
    registry.register("application/json", JSONLoader())
    registry.register(PDF_MIME_TYPE, PDFLoader())
    registry.register(DOCX_MIME_TYPE, DocxLoader())
    return registry
