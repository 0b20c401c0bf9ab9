"""Job postings: create, read, partial update, delete."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

from ..documents import DeleteResult, DocumentStore, InsertOneResult, UpdateResult, is_valid_object_id
from ..errors import InsertError, InvalidIdentifier, NotFound
from ..logging_config import get_logger
from ..patch import JobPatch

logger = get_logger(__name__)

JOBS_COLLECTION = "jobs"


def _require_valid_id(job_id: str) -> str:
    if not is_valid_object_id(job_id):
        logger.warning("rejected malformed job id=%r", job_id)
        raise InvalidIdentifier("Invalid Job ID format")
    return job_id


class JobStore:
    def __init__(self, store: DocumentStore):
        self._jobs = store.collection(JOBS_COLLECTION)

    def create(self, fields: Mapping[str, Any]) -> InsertOneResult:
        body = {k: v for k, v in fields.items() if k != "_id"}
        body["createdAt"] = datetime.now(timezone.utc)
        result = self._jobs.insert_one(body)
        if not (result.acknowledged and result.inserted_id):
            raise InsertError()
        logger.info("job created id=%s postedBy=%s", result.inserted_id, body.get("postedBy"))
        return result

    def list(self) -> List[Dict[str, Any]]:
        return self._jobs.find()

    def get_by_id(self, job_id: str) -> Dict[str, Any]:
        _require_valid_id(job_id)
        job = self._jobs.find_one({"_id": job_id})
        if job is None:
            raise NotFound("Cannot find job")
        return job

    def list_by_poster(self, poster_email: str, allow_empty: bool = False) -> List[Dict[str, Any]]:
        """Jobs whose ``postedBy`` equals ``poster_email`` exactly.

        No matches raise NotFound unless ``allow_empty`` is set.
        """
        jobs = self._jobs.find({"postedBy": poster_email})
        if not jobs and not allow_empty:
            raise NotFound("No jobs found for this user")
        return jobs

    def find_many(self, job_ids: Iterable[str]) -> List[Dict[str, Any]]:
        """One batched lookup; ids with no job are silently absent."""
        return self._jobs.find({"_id": {"$in": list(job_ids)}})

    def update(self, job_id: str, fields: Mapping[str, Any]) -> UpdateResult:
        _require_valid_id(job_id)
        # fetch-then-write is not atomic; a concurrent delete lands as matched_count=0
        existing = self._jobs.find_one({"_id": job_id})
        if existing is None:
            raise NotFound("Job not found")

        patch = JobPatch.from_request(fields)
        if patch.is_empty:
            return UpdateResult(matched_count=1, modified_count=0)
        result = self._jobs.update_one({"_id": job_id}, patch.to_update_document())
        logger.info("job updated id=%s modified=%d", job_id, result.modified_count)
        return result

    def delete(self, job_id: str) -> DeleteResult:
        _require_valid_id(job_id)
        result = self._jobs.delete_one({"_id": job_id})
        logger.info("job delete id=%s deleted=%d", job_id, result.deleted_count)
        return result
