"""Exception hierarchy shared by the upload pipeline and its collaborators."""
from __future__ import annotations

from typing import Sequence


class StudyHubError(RuntimeError):
    """Base class for all errors raised by the service."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class UploadRejectedError(StudyHubError):
    """Raised when a submission is rejected before any job is created."""

    def __init__(self, message: str, details: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.details = list(details or [])


class JobFailedError(StudyHubError):
    """Raised once a queued job has been moved to ``failed``."""

    def __init__(self, job_id: str, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message, cause=cause)
        self.job_id = job_id


class StorageError(StudyHubError):
    """Raised when uploaded bytes cannot be persisted or read back."""


class NoLoaderRegisteredError(StudyHubError):
    """Raised when a file's media type has no extraction strategy."""

    def __init__(self, media_type: str) -> None:
        super().__init__(f"No document loader registered for {media_type}")
        self.media_type = media_type


class DocumentLoadError(StudyHubError):
    """Raised when a loader cannot turn stored bytes into documents."""


class LLMConfigError(StudyHubError):
    """Raised for missing or invalid LLM provider configuration."""


class LLMGenerationError(StudyHubError):
    """Raised when a provider call fails or times out."""


class FlashcardParseError(StudyHubError):
    """Raised when an LLM response cannot be turned into flashcards."""


class IllegalStatusTransitionError(StudyHubError):
    """Raised when a job status change is not in the transition table."""


class IllegalInitialTransitionError(IllegalStatusTransitionError):
    """Raised when a job's first recorded status is not ``queued``."""
