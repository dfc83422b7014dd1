"""Job status tracking."""

from .status import (
    ALLOWED_TRANSITIONS,
    FirestoreJobStore,
    InMemoryJobStore,
    JobRecord,
    JobStatus,
    JobStore,
    StatusTracker,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "FirestoreJobStore",
    "InMemoryJobStore",
    "JobRecord",
    "JobStatus",
    "JobStore",
    "StatusTracker",
]
