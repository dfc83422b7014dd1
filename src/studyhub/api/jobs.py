"""Job status lookups."""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException

from studyhub.jobs import StatusTracker
from studyhub.services.dependencies import get_status_tracker

router = APIRouter(prefix="/api", tags=["jobs"])


@router.get("/jobs/{job_id}")
def get_job(job_id: str, tracker: StatusTracker = Depends(get_status_tracker)) -> Dict[str, Any]:
    record = tracker.get(job_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return record.to_dict()
