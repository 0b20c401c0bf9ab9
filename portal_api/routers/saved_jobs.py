from fastapi import APIRouter, Depends

from ..deps import Services, get_services
from ..schemas import InsertAck, SavedJobCreate, SavedJobsOut

router = APIRouter(prefix="/api/savedJobs", tags=["saved jobs"])


@router.get("/{user_id}", response_model=SavedJobsOut)
def saved_jobs(user_id: str, services: Services = Depends(get_services)):
    return SavedJobsOut(savedJobs=services.saved_jobs.list_saved_jobs(user_id))


@router.post("", status_code=201, response_model=InsertAck)
def save_job(payload: SavedJobCreate, services: Services = Depends(get_services)):
    result = services.saved_jobs.save(payload.userId, payload.jobId)
    return InsertAck(acknowledged=result.acknowledged, insertedId=result.inserted_id)
