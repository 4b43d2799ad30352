"""
Job Board API
=============
Employers post jobs, job seekers apply, and both sides get live updates

Flow:
1. Users register as employer or job seeker and receive a session token
2. Employers post jobs -> every connected job seeker is notified
3. Job seekers apply -> the employer is notified
4. Employers reject or schedule an interview -> the applicant is notified
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import init_db
from app.core.exceptions import JobBoardError
from app.core.logging import configure_logging, get_logger
from app.api import api_router
from app.api.routes import notifications
from app.services.notifications import NotificationDispatcher

configure_logging()
logger = get_logger(__name__)

SERVER_ERROR_MESSAGE = "Something went wrong!"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database on startup"""
    logger.info("Starting Job Board API", port=settings.PORT)
    init_db()
    logger.info("Database initialized")
    yield
    logger.info("Shutting down")


def setup_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"message": ...}"""

    @app.exception_handler(JobBoardError)
    async def job_board_error_handler(request: Request, exc: JobBoardError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            field = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"Invalid {field}: {errors[0].get('msg')}" if field else errors[0].get("msg")
        else:
            message = "Invalid request"
        return JSONResponse(status_code=400, content={"message": message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error("Unhandled error", path=request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content={"message": SERVER_ERROR_MESSAGE})


def create_app(dispatcher: NotificationDispatcher = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Job board with live application status notifications",
        version="1.0.0",
        lifespan=lifespan
    )

    # One registry per process; notifications only reach clients of this worker
    app.state.dispatcher = dispatcher or NotificationDispatcher()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(api_router, prefix="/api")
    app.include_router(notifications.router)

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": settings.APP_NAME}

    @app.get("/")
    def root():
        """Root endpoint with API info"""
        return {
            "service": settings.APP_NAME,
            "version": "1.0.0",
            "docs": "/docs",
            "endpoints": {
                "auth": "/api/auth",
                "jobs": "/api/jobs",
                "applications": "/api/applications",
                "notifications": "/ws"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
