"""
Job API Endpoints
Public job listing, posting (employers) and applying (job seekers)
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_job_store, get_lifecycle, require_employer, require_job_seeker
from app.core.database import get_db
from app.core.security import SessionIdentity
from app.schemas.job import JobCreate, JobResponse, JobListingResponse, JobPostedResponse
from app.schemas.application import ApplicationResponse, ApplyResponse
from app.services.job_store import JobStore
from app.services.lifecycle import ApplicationLifecycle

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.get("", response_model=List[JobListingResponse])
def list_jobs(
    store: JobStore = Depends(get_job_store),
    db: Session = Depends(get_db)
):
    """
    List all jobs, newest first
    Each entry carries the employer's display name
    """
    return [
        JobListingResponse(
            **JobResponse.model_validate(job).model_dump(),
            employer_name=employer_name
        )
        for job, employer_name in store.list_jobs(db)
    ]


@router.post("", response_model=JobPostedResponse, status_code=status.HTTP_201_CREATED)
def post_job(
    body: JobCreate,
    identity: SessionIdentity = Depends(require_employer),
    store: JobStore = Depends(get_job_store),
    db: Session = Depends(get_db)
):
    """Post a new job (employers only); job seekers are notified"""
    job = store.post_job(
        db,
        employer_id=identity.id,
        title=body.title,
        description=body.description,
        requirements=body.requirements,
        location=body.location
    )
    return JobPostedResponse(
        message="Job posted successfully",
        job=JobResponse.model_validate(job)
    )


@router.post("/{job_id}/apply", response_model=ApplyResponse, status_code=status.HTTP_201_CREATED)
def apply_for_job(
    job_id: int,
    identity: SessionIdentity = Depends(require_job_seeker),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    db: Session = Depends(get_db)
):
    """Apply for a job (job seekers only); the employer is notified"""
    application = lifecycle.apply(db, job_id=job_id, applicant_id=identity.id)
    return ApplyResponse(
        message="Application submitted successfully",
        application=ApplicationResponse.model_validate(application)
    )
