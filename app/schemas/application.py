"""
Pydantic schemas for Application API
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ApplicationResponse(BaseModel):
    id: int
    job_id: int
    user_id: int
    status: str
    applied_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ApplyResponse(BaseModel):
    message: str
    application: ApplicationResponse


class RejectRequest(BaseModel):
    reason: Optional[str] = None


class ScheduleInterviewRequest(BaseModel):
    interviewDate: Optional[datetime] = None


class EmployerApplicationResponse(BaseModel):
    """Application as seen on the employer dashboard"""
    id: int
    job_id: int
    job_title: str
    applicant_id: int
    applicant_name: str
    status: str
    applied_at: Optional[datetime] = None


class MessageResponse(BaseModel):
    message: str
