"""
Credential service
Password hashing (bcrypt) and stateless session tokens (JWT)
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from app.core.config import settings
from app.core.exceptions import InternalError, InvalidSession

MIN_BCRYPT_ROUNDS = 10


@dataclass(frozen=True)
class SessionIdentity:
    """Identity carried by a validated session token"""
    id: int
    email: str
    role: str


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    rounds = max(settings.BCRYPT_ROUNDS, MIN_BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_session(user, now: Optional[datetime] = None) -> str:
    """
    Sign a session token for a user
    Encodes id, email and role; expires JWT_EXPIRATION_HOURS after issuance
    """
    issued_at = now or datetime.now(timezone.utc)
    claims = {
        "id": user.id,
        "email": user.email,
        "userType": user.user_type,
        "iat": issued_at,
        "exp": issued_at + timedelta(hours=settings.JWT_EXPIRATION_HOURS),
    }
    try:
        return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    except (jwt.PyJWTError, NotImplementedError) as e:
        # Misconfigured algorithm or key
        raise InternalError("Could not sign session") from e


def validate_session(token: str) -> SessionIdentity:
    """Decode a session token, raising InvalidSession on any failure"""
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "id", "userType"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidSession("Session expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidSession("Invalid token") from e

    try:
        return SessionIdentity(
            id=int(claims["id"]),
            email=claims.get("email", ""),
            role=claims["userType"],
        )
    except (TypeError, ValueError) as e:
        raise InvalidSession("Invalid token") from e
