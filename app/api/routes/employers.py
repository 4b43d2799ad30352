"""
Employer dashboard endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.api.deps import get_lifecycle, require_employer
from app.core.database import get_db
from app.core.security import SessionIdentity
from app.schemas.application import EmployerApplicationResponse
from app.services.lifecycle import ApplicationLifecycle

router = APIRouter(prefix="/employers", tags=["Employers"])


@router.get("/applications", response_model=List[EmployerApplicationResponse])
def list_applications(
    identity: SessionIdentity = Depends(require_employer),
    lifecycle: ApplicationLifecycle = Depends(get_lifecycle),
    db: Session = Depends(get_db)
):
    """Applications received for the employer's jobs, newest first"""
    return lifecycle.list_employer_applications(db, identity.id)
