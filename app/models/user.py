"""
User account database model
"""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base
import enum


class UserType(str, enum.Enum):
    EMPLOYER = "employer"
    JOB_SEEKER = "job_seeker"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    user_type = Column(String(20), nullable=False)  # Fixed at registration
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    jobs = relationship("Job", back_populates="employer")
    applications = relationship("Application", back_populates="applicant")

    def __repr__(self):
        return f"<User {self.email} ({self.user_type})>"
