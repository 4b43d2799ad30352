from fastapi import APIRouter
from app.api.routes import auth, jobs, applications, employers

api_router = APIRouter()

# Include all route modules
api_router.include_router(auth.router)
api_router.include_router(jobs.router)
api_router.include_router(applications.router)
api_router.include_router(employers.router)
