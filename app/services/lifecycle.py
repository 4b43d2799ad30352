"""
Application Lifecycle Manager
Records applications and moves them through their states:

    pending -> rejected
    pending -> interview_scheduled

Both decided states are terminal. Every transition is a single conditional
UPDATE guarded on the pending state, so concurrent decisions on the same
application cannot both succeed.
"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.core.logging import get_logger
from app.models.application import (
    Application, ApplicationStatus, Rejection, DEFAULT_REJECTION_REASON
)
from app.models.interview import Interview
from app.models.job import Job
from app.models.user import User
from app.services.notifications import (
    APPLICATION_REJECTED, INTERVIEW_SCHEDULED, NEW_APPLICATION, NotificationDispatcher
)

logger = get_logger(__name__)


def format_interview_date(value: datetime) -> str:
    """Date as shown to applicants, e.g. 2025-03-10 10:00"""
    if value.tzinfo is not None:
        return value.strftime("%Y-%m-%d %H:%M %Z").strip()
    return value.strftime("%Y-%m-%d %H:%M")


class ApplicationLifecycle:
    """Service for applying to jobs and deciding on applications"""

    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher

    def apply(self, db: Session, job_id: int, applicant_id: int) -> Application:
        """Record a pending application and tell the employer about it"""
        job = db.query(Job).filter(Job.id == job_id).first()
        if not job:
            raise NotFound("Job not found")

        applicant = db.query(User).filter(User.id == applicant_id).first()
        if not applicant:
            raise NotFound("User not found")

        existing = db.query(Application.id).filter(
            Application.job_id == job_id,
            Application.user_id == applicant_id
        ).first()
        if existing:
            raise Conflict("Already applied for this job")

        application = Application(
            job_id=job_id,
            user_id=applicant_id,
            status=ApplicationStatus.PENDING.value,
            applied_at=datetime.utcnow()
        )
        db.add(application)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent duplicate caught by the (job, user) constraint
            db.rollback()
            raise Conflict("Already applied for this job")
        db.refresh(application)

        logger.info("Application created", application_id=application.id,
                    job_id=job_id, applicant_id=applicant_id)

        self.dispatcher.notify_user(job.employer_id, NEW_APPLICATION, {
            "message": f"{applicant.name} has applied for your job: {job.title}",
            "jobId": job.id,
            "applicationId": application.id,
            "applicantId": applicant_id,
        })
        return application

    def reject(
        self,
        db: Session,
        application_id: int,
        employer_id: int,
        reason: Optional[str] = None
    ) -> Application:
        """Reject a pending application on one of the employer's jobs"""
        application, job = self._owned_application(db, application_id, employer_id)

        self._transition(db, application_id, ApplicationStatus.REJECTED)
        db.add(Rejection(
            application_id=application_id,
            reason=reason.strip() if reason and reason.strip() else DEFAULT_REJECTION_REASON
        ))
        db.commit()
        db.refresh(application)

        logger.info("Application rejected", application_id=application_id,
                    employer_id=employer_id)

        self.dispatcher.notify_user(application.user_id, APPLICATION_REJECTED, {
            "message": f"Sorry, your application for {job.title} was rejected.",
            "jobId": job.id,
            "applicationId": application_id,
        })
        return application

    def schedule_interview(
        self,
        db: Session,
        application_id: int,
        employer_id: int,
        interview_date: Optional[datetime]
    ) -> Application:
        """Schedule an interview for a pending application"""
        if interview_date is None:
            raise ValidationError("Interview date is required")

        application, job = self._owned_application(db, application_id, employer_id)

        self._transition(db, application_id, ApplicationStatus.INTERVIEW_SCHEDULED)
        db.add(Interview(application_id=application_id, interview_date=interview_date))
        db.commit()
        db.refresh(application)

        logger.info("Interview scheduled", application_id=application_id,
                    employer_id=employer_id, interview_date=interview_date.isoformat())

        self.dispatcher.notify_user(application.user_id, INTERVIEW_SCHEDULED, {
            "message": f"Your interview for {job.title} is scheduled on {format_interview_date(interview_date)}.",
            "jobId": job.id,
            "applicationId": application_id,
            "interviewDate": interview_date.isoformat(),
        })
        return application

    def list_employer_applications(self, db: Session, employer_id: int) -> List[dict]:
        """Applications to the employer's jobs, newest first"""
        rows = (
            db.query(Application, Job.title, User.name)
            .join(Job, Application.job_id == Job.id)
            .join(User, Application.user_id == User.id)
            .filter(Job.employer_id == employer_id)
            .order_by(Application.applied_at.desc(), Application.id.desc())
            .all()
        )
        return [
            {
                "id": application.id,
                "job_id": application.job_id,
                "job_title": job_title,
                "applicant_id": application.user_id,
                "applicant_name": applicant_name,
                "status": application.status,
                "applied_at": application.applied_at,
            }
            for application, job_title, applicant_name in rows
        ]

    def _owned_application(
        self, db: Session, application_id: int, employer_id: int
    ) -> Tuple[Application, Job]:
        # Ownership is part of the lookup: another employer's application is not found
        owned = (
            db.query(Application, Job)
            .join(Job, Application.job_id == Job.id)
            .filter(Application.id == application_id, Job.employer_id == employer_id)
            .first()
        )
        if not owned:
            raise NotFound("Application not found")
        return owned

    def _transition(self, db: Session, application_id: int, target: ApplicationStatus) -> None:
        updated = (
            db.query(Application)
            .filter(
                Application.id == application_id,
                Application.status == ApplicationStatus.PENDING.value
            )
            .update({Application.status: target.value}, synchronize_session=False)
        )
        if updated == 0:
            db.rollback()
            logger.info("Transition refused, application already decided",
                        application_id=application_id, target=target.value)
            raise Conflict("Application has already been decided")
