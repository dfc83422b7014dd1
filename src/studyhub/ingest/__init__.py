"""Document extraction and chunking."""

from .chunking import TextChunker
from .loaders import CSVLoader, DocumentLoader, DocxLoader, JSONLoader, PDFLoader, TextLoader
from .registry import LoaderRegistry, default_registry

__all__ = [
    "CSVLoader",
    "DocumentLoader",
    "DocxLoader",
    "JSONLoader",
    "LoaderRegistry",
    "PDFLoader",
    "TextChunker",
    "TextLoader",
    "default_registry",
]
