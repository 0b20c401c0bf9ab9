from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from ..documents import DocumentStore, InsertOneResult
from ..errors import MissingFile
from ..logging_config import get_logger
from ..uploads import StoredFile

logger = get_logger(__name__)

APPLICATIONS_COLLECTION = "applications"
APPLICANT_FIELDS = ("name", "email", "phone", "address", "describeYourself")


class ApplicationStore:
    def __init__(self, store: DocumentStore):
        self._applications = store.collection(APPLICATIONS_COLLECTION)

    def submit(self, job_id: Optional[str], applicant: Mapping[str, Any], cv: Optional[StoredFile]) -> InsertOneResult:
        # job_id is stored as given; it is not checked against the jobs collection
        if cv is None or not cv.path:
            raise MissingFile("CV file is required")
        application = {"jobId": job_id}
        application.update({field: applicant.get(field) for field in APPLICANT_FIELDS})
        application["cv"] = cv.path
        application["appliedAt"] = datetime.now(timezone.utc)
        result = self._applications.insert_one(application)
        logger.info("application submitted id=%s jobId=%s", result.inserted_id, job_id)
        return result
