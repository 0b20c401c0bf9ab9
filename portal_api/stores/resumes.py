from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from ..documents import DocumentStore, InsertOneResult
from ..errors import MissingFile
from ..logging_config import get_logger
from ..uploads import StoredFile

logger = get_logger(__name__)

RESUMES_COLLECTION = "resumes"


class ResumeStore:
    def __init__(self, store: DocumentStore):
        self._resumes = store.collection(RESUMES_COLLECTION)

    def upload(self, email: Optional[str], file: Optional[StoredFile]) -> InsertOneResult:
        if file is None:
            raise MissingFile("No file uploaded")
        result = self._resumes.insert_one({
            "email": email,
            "fileName": file.filename,
            "filePath": file.path,
            "uploadedAt": datetime.now(timezone.utc),
        })
        logger.info("resume stored id=%s email=%s file=%s", result.inserted_id, email, file.filename)
        return result
