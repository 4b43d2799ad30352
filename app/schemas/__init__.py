from app.schemas.user import RegisterRequest, LoginRequest, UserResponse, AuthResponse
from app.schemas.job import JobCreate, JobResponse, JobListingResponse, JobPostedResponse
from app.schemas.application import (
    ApplicationResponse, ApplyResponse, RejectRequest,
    ScheduleInterviewRequest, EmployerApplicationResponse, MessageResponse
)
