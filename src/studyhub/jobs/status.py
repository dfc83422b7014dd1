"""Job lifecycle state machine and its persistence contract."""
from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Protocol

from studyhub.errors import IllegalInitialTransitionError, IllegalStatusTransitionError
from studyhub.logging_config import audit
from studyhub.models import utc_now_iso

LOGGER = logging.getLogger(__name__)


class JobStatus(str, Enum):
    QUEUED = "queued"
    PARSING = "parsing"
    GENERATING = "generating"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS: Dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.QUEUED: frozenset({JobStatus.PARSING, JobStatus.FAILED}),
    JobStatus.PARSING: frozenset({JobStatus.GENERATING, JobStatus.FAILED}),
    JobStatus.GENERATING: frozenset({JobStatus.COMPLETE, JobStatus.FAILED}),
    JobStatus.COMPLETE: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass(slots=True)
class JobRecord:
    """Current status of a job plus everything reported along the way."""

    job_id: str
    status: JobStatus
    payload: Dict[str, Any] = field(default_factory=dict)
    history: List[JobStatus] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jobId": self.job_id,
            "status": self.status.value,
            "payload": copy.deepcopy(self.payload),
            "history": [status.value for status in self.history],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobRecord":
        return cls(
            job_id=str(data["jobId"]),
            status=JobStatus(data["status"]),
            payload=dict(data.get("payload") or {}),
            history=[JobStatus(item) for item in data.get("history") or []],
            created_at=str(data.get("createdAt") or utc_now_iso()),
            updated_at=str(data.get("updatedAt") or utc_now_iso()),
        )


class JobStore(Protocol):
    def get(self, job_id: str) -> Optional[JobRecord]:
        ...

    def put(self, record: JobRecord) -> None:
        ...


class InMemoryJobStore:
    """Process-local job store used by default and in tests."""

    def __init__(self) -> None:
        self._records: Dict[str, Dict[str, Any]] = {}

    def get(self, job_id: str) -> Optional[JobRecord]:
        data = self._records.get(job_id)
        return JobRecord.from_dict(data) if data is not None else None

    def put(self, record: JobRecord) -> None:
        self._records[record.job_id] = record.to_dict()


class FirestoreJobStore:
    """Job store backed by a Firestore collection, one document per job."""

    def __init__(self, client: Any, collection: str = "uploadJobs") -> None:
        self._client = client
        self.collection = collection

    def get(self, job_id: str) -> Optional[JobRecord]:
        snapshot = self._client.collection(self.collection).document(job_id).get()
        if not snapshot.exists:
            return None
        return JobRecord.from_dict(snapshot.to_dict() or {})

    def put(self, record: JobRecord) -> None:
        self._client.collection(self.collection).document(record.job_id).set(record.to_dict())


class StatusTracker:
    """Validates and persists job status transitions.

    Only one writer is expected per job. The lock makes the read-validate-write
    sequence atomic within this process; it does not coordinate across
    processes sharing a remote store.
    """

    def __init__(self, store: Optional[JobStore] = None) -> None:
        self.store: JobStore = store if store is not None else InMemoryJobStore()
        self._lock = threading.Lock()

    def get(self, job_id: str) -> Optional[JobRecord]:
        return self.store.get(job_id)

    def update_status(
        self,
        job_id: str,
        status: JobStatus | str,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> JobRecord:
        new_status = JobStatus(status)
        with self._lock:
            record = self.store.get(job_id)
            if record is None:
                if new_status is not JobStatus.QUEUED:
                    raise IllegalInitialTransitionError(
                        f"illegal initial transition for job {job_id}: "
                        f"must start in queued, got {new_status.value}"
                    )
                record = JobRecord(job_id=job_id, status=new_status)
            else:
                if new_status not in ALLOWED_TRANSITIONS[record.status]:
                    raise IllegalStatusTransitionError(
                        f"illegal transition for job {job_id} "
                        f"from {record.status.value} to {new_status.value}"
                    )
                record.status = new_status
                record.updated_at = utc_now_iso()

            record.history.append(new_status)
            if payload:
                record.payload.update(copy.deepcopy(dict(payload)))
            self.store.put(record)

        LOGGER.debug("Job %s moved to %s", job_id, new_status.value)
        audit("job.status", job_id=job_id, status=new_status.value)
        return record
