"""
Pydantic schemas for Job API
"""
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class JobCreate(BaseModel):
    """Body for posting a job; emptiness is checked by the job store"""
    title: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    location: Optional[str] = None


class JobResponse(BaseModel):
    id: int
    title: str
    description: str
    requirements: str
    location: str
    employer_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class JobListingResponse(JobResponse):
    """Public listing entry, joined with the employer's display name"""
    employer_name: str


class JobPostedResponse(BaseModel):
    message: str
    job: JobResponse
