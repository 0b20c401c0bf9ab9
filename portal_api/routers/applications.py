from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from ..deps import Services, get_services
from ..errors import MissingFile
from ..schemas import FileInfo, MessageOut, UploadOut

router = APIRouter(tags=["applications"])


def _require_upload(upload: Optional[UploadFile], message: str) -> UploadFile:
    if upload is None or not upload.filename:
        raise MissingFile(message)
    return upload


@router.post("/api/upload-cv", response_model=UploadOut)
def upload_cv(
    cv: Optional[UploadFile] = File(None),
    email: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    upload = _require_upload(cv, "No file uploaded")
    stored = services.intake.accept("cv", upload.file, upload.filename, upload.content_type)
    services.resumes.upload(email, stored)
    return UploadOut(message="CV uploaded successfully!", file=FileInfo(**stored.to_dict()))


@router.post("/api/apply", status_code=201, response_model=MessageOut)
@router.post("/apply", status_code=201, response_model=MessageOut, include_in_schema=False)
def apply(
    cv: Optional[UploadFile] = File(None),
    jobId: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    describeYourself: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    """Store a job application together with its uploaded CV."""
    upload = _require_upload(cv, "CV file is required")
    stored = services.intake.accept("cv", upload.file, upload.filename, upload.content_type)
    applicant = {
        "name": name,
        "email": email,
        "phone": phone,
        "address": address,
        "describeYourself": describeYourself,
    }
    services.applications.submit(jobId, applicant, stored)
    return MessageOut(message="Application submitted successfully")
