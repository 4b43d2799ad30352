"""
Job application database models
An application is created once per (job, applicant) and decided at most once
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base
import enum


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"                          # Just applied
    REJECTED = "rejected"                        # Terminal
    INTERVIEW_SCHEDULED = "interview_scheduled"  # Terminal


DEFAULT_REJECTION_REASON = "No reason provided"


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="uq_application_job_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    job_id = Column(Integer, ForeignKey("jobs.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(30), nullable=False, default=ApplicationStatus.PENDING.value)
    applied_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")
    rejection = relationship("Rejection", back_populates="application", uselist=False)
    interview = relationship("Interview", back_populates="application", uselist=False)

    @property
    def applicant_id(self):
        return self.user_id

    def __repr__(self):
        return f"<Application #{self.id} for Job #{self.job_id} ({self.status})>"


class Rejection(Base):
    __tablename__ = "rejections"

    id = Column(Integer, primary_key=True, index=True)
    application_id = Column(Integer, ForeignKey("applications.id"), nullable=False, unique=True)
    reason = Column(Text, nullable=False, default=DEFAULT_REJECTION_REASON)
    created_at = Column(DateTime, default=datetime.utcnow)

    application = relationship("Application", back_populates="rejection")

    def __repr__(self):
        return f"<Rejection for Application #{self.application_id}>"
