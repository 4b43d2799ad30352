"""
Authentication API Endpoints
Registration, login and the current user
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity
from app.core.database import get_db
from app.core.security import SessionIdentity
from app.schemas.user import RegisterRequest, LoginRequest, UserResponse, AuthResponse
from app.services import accounts

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Register an employer or job seeker and sign them in"""
    user, token = accounts.register_user(
        db, body.name, body.email, body.password, body.userType
    )
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token
    )


@router.post("/login", response_model=AuthResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user, token = accounts.authenticate_user(db, body.email, body.password)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token
    )


@router.get("/me", response_model=UserResponse)
def me(
    identity: SessionIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db)
):
    """Get the signed-in user"""
    return accounts.get_user(db, identity.id)
