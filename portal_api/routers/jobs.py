from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from ..deps import get_jobs
from ..schemas import DeleteAck, InsertAck, PosterJobs, UpdateAck
from ..stores.jobs import JobStore

# Legacy paths without the /api prefix are kept for older front-ends.
router = APIRouter(tags=["jobs"])


@router.post("/api/post-job", response_model=InsertAck)
@router.post("/post-job", response_model=InsertAck, include_in_schema=False)
def post_job(fields: Dict[str, Any] = Body(...), jobs: JobStore = Depends(get_jobs)):
    result = jobs.create(fields)
    return InsertAck(acknowledged=result.acknowledged, insertedId=result.inserted_id)


@router.get("/api/all-jobs")
def all_jobs(jobs: JobStore = Depends(get_jobs)) -> List[Dict[str, Any]]:
    return jobs.list()


@router.get("/api/all-jobs/{job_id}")
@router.get("/all-jobs/{job_id}", include_in_schema=False)
def get_job(job_id: str, jobs: JobStore = Depends(get_jobs)) -> Dict[str, Any]:
    return jobs.get_by_id(job_id)


@router.get("/api/myJobs/{email}", response_model=PosterJobs)
@router.get("/myJobs/{email}", response_model=PosterJobs, include_in_schema=False)
def my_jobs(email: str, jobs: JobStore = Depends(get_jobs)):
    return PosterJobs(jobs=jobs.list_by_poster(email))


@router.delete("/api/job/{job_id}", response_model=DeleteAck)
@router.delete("/job/{job_id}", response_model=DeleteAck, include_in_schema=False)
def delete_job(job_id: str, jobs: JobStore = Depends(get_jobs)):
    result = jobs.delete(job_id)
    return DeleteAck(acknowledged=result.acknowledged, deletedCount=result.deleted_count)


@router.patch("/api/update-job/{job_id}", response_model=UpdateAck)
@router.patch("/update-job/{job_id}", response_model=UpdateAck, include_in_schema=False)
def update_job(job_id: str, fields: Dict[str, Any] = Body(...), jobs: JobStore = Depends(get_jobs)):
    result = jobs.update(job_id, fields)
    return UpdateAck(acknowledged=result.acknowledged)
