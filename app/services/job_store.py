"""
Job Store
Creates and lists job postings, announcing new ones to job seekers
"""
from typing import List, Tuple

from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.core.logging import get_logger
from app.models.job import Job
from app.models.user import User, UserType
from app.services.notifications import NEW_JOB, NotificationDispatcher

logger = get_logger(__name__)


class JobStore:
    """Service for posting and listing jobs"""

    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher

    def list_jobs(self, db: Session) -> List[Tuple[Job, str]]:
        """
        All jobs, newest first, each paired with the employer's name
        Ties on creation time fall back to id so the order is strict
        """
        return (
            db.query(Job, User.name)
            .join(User, Job.employer_id == User.id)
            .order_by(Job.created_at.desc(), Job.id.desc())
            .all()
        )

    def post_job(
        self,
        db: Session,
        employer_id: int,
        title: str,
        description: str,
        requirements: str,
        location: str,
    ) -> Job:
        """Create a job posting and notify every job seeker about it"""
        fields = (title, description, requirements, location)
        if not all(v and v.strip() for v in fields):
            raise ValidationError("All fields are required")

        job = Job(
            title=title.strip(),
            description=description.strip(),
            requirements=requirements.strip(),
            location=location.strip(),
            employer_id=employer_id,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        logger.info("Job posted", job_id=job.id, employer_id=employer_id)

        seeker_ids = [
            row.id for row in
            db.query(User.id).filter(User.user_type == UserType.JOB_SEEKER.value).all()
        ]
        self.dispatcher.notify_users(seeker_ids, NEW_JOB, {
            "message": f"New Job Alert: {job.title}",
            "jobId": job.id,
        })

        return job
