"""Application services wiring the pipeline stages together."""

from .upload import UploadOrchestrator, UploadResult

__all__ = ["UploadOrchestrator", "UploadResult"]
