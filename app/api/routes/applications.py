"""
Application API Endpoints
Employers decide on applications to their own jobs.
The path id is always an application id, never a job id.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Optional

from app.api.deps import get_lifecycle, require_employer
from app.core.database import get_db
from app.core.security import SessionIdentity
from app.schemas.application import MessageResponse, RejectRequest, ScheduleInterviewRequest
from app.services.lifecycle import ApplicationLifecycle

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post("/{application_id}/reject", response_model=MessageResponse)
def reject_application(
    application_id: int,
    body: Optional[RejectRequest] = None,
    identity: SessionIdentity = Depends(require_employer),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    db: Session = Depends(get_db)
):
    """Reject a pending application; the reason is optional"""
    reason = body.reason if body else None
    lifecycle.reject(db, application_id, employer_id=identity.id, reason=reason)
    return MessageResponse(message="Application rejected successfully")


@router.post("/{application_id}/schedule-interview", response_model=MessageResponse)
def schedule_interview(
    application_id: int,
    body: ScheduleInterviewRequest,
    identity: SessionIdentity = Depends(require_employer),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    db: Session = Depends(get_db)
):
    lifecycle.schedule_interview(
        db, application_id, employer_id=identity.id, interview_date=body.interviewDate
    )
    return MessageResponse(message="Interview scheduled successfully")
