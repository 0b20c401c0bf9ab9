from pydantic import BaseModel
from typing import Any, Dict, List, Optional


class SubscribeRequest(BaseModel):
    email: Optional[str] = None


class SavedJobCreate(BaseModel):
    userId: Optional[str] = None
    jobId: Optional[str] = None


class InsertAck(BaseModel):
    acknowledged: bool
    insertedId: Optional[str] = None


class DeleteAck(BaseModel):
    acknowledged: bool
    deletedCount: int


class UpdateAck(BaseModel):
    acknowledged: bool
    message: str = "Job updated successfully"


class MessageOut(BaseModel):
    message: str


class FileInfo(BaseModel):
    fieldname: str
    originalname: str
    filename: str
    path: str
    size: int
    mimetype: Optional[str] = None


class UploadOut(BaseModel):
    message: str
    file: FileInfo


class PosterJobs(BaseModel):
    status: bool = True
    jobs: List[Dict[str, Any]]


class SavedJobsOut(BaseModel):
    status: bool = True
    savedJobs: List[Dict[str, Any]]


__all__ = [
    "SubscribeRequest",
    "SavedJobCreate",
    "InsertAck",
    "DeleteAck",
    "UpdateAck",
    "MessageOut",
    "FileInfo",
    "UploadOut",
    "PosterJobs",
    "SavedJobsOut",
]
