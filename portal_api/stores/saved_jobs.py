from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..documents import DocumentStore, InsertOneResult, is_valid_object_id
from ..errors import InvalidIdentifier, MissingField, NotFound
from ..logging_config import get_logger
from .jobs import JobStore

logger = get_logger(__name__)

SAVED_JOBS_COLLECTION = "savedJobs"


class SavedJobIndex:
    def __init__(self, store: DocumentStore, jobs: JobStore):
        self._saved = store.collection(SAVED_JOBS_COLLECTION)
        self._jobs = jobs

    def save(self, user_id: Optional[str], job_id: Optional[str]) -> InsertOneResult:
        if not user_id or not job_id:
            raise MissingField("userId and jobId are required")
        if not is_valid_object_id(job_id):
            raise InvalidIdentifier("Invalid Job ID format")
        result = self._saved.insert_one({
            "userId": user_id,
            "jobId": job_id,
            "savedAt": datetime.now(timezone.utc),
        })
        logger.info("saved job userId=%s jobId=%s", user_id, job_id)
        return result

    def list_saved_jobs(self, user_id: str, allow_empty: bool = False) -> List[Dict[str, Any]]:
        """Resolve a user's saved rows to the job records they point at.

        No saved rows raise NotFound unless ``allow_empty`` is set. Rows pointing
        at deleted (or malformed) job ids drop out of the result.
        """
        rows = self._saved.find({"userId": user_id})
        if not rows:
            if allow_empty:
                return []
            raise NotFound("No saved jobs found for this user")
        job_ids = [r.get("jobId") for r in rows if is_valid_object_id(r.get("jobId"))]
        jobs = self._jobs.find_many(job_ids)
        if len(jobs) < len(set(job_ids)):
            logger.info("saved jobs userId=%s: %d of %d no longer exist",
                        user_id, len(set(job_ids)) - len(jobs), len(set(job_ids)))
        return jobs
