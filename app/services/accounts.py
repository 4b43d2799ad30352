"""
Account services:
- register (create user + issue session)
- login (verify credentials + issue session)
- current user lookup
"""
from typing import Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import Conflict, NotFound, ValidationError
from app.core.logging import get_logger
from app.core.security import hash_password, issue_session, verify_password
from app.models.user import User, UserType

logger = get_logger(__name__)

VALID_USER_TYPES = [t.value for t in UserType]


def register_user(
    db: Session, name: str, email: str, password: str, user_type: str
) -> Tuple[User, str]:
    """
    Create a new user and sign a session token for it.
    Returns (user, token)
    """
    if not all(v and str(v).strip() for v in (name, email, password, user_type)):
        raise ValidationError("All fields are required")

    user_type = user_type.strip()
    if user_type not in VALID_USER_TYPES:
        raise ValidationError(f"Invalid user type. Must be one of: {VALID_USER_TYPES}")

    email = str(email).lower().strip()
    existing = db.query(User.id).filter(User.email == email).first()
    if existing:
        raise Conflict("User already exists")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        user_type=user_type,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration of the same email
        db.rollback()
        raise Conflict("User already exists")
    db.refresh(user)

    logger.info("User registered", user_id=user.id, user_type=user.user_type)
    return user, issue_session(user)


def authenticate_user(db: Session, email: str, password: str) -> Tuple[User, str]:
    """
    Verify email & password. Returns (user, token)
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    email = email.lower().strip()
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login failed", email=email)
        raise ValidationError("Invalid credentials")

    return user, issue_session(user)


def get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user
