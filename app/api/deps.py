"""
Authorization gate and service dependencies

get_current_identity authenticates the bearer token; require_role builds a
guard that additionally checks the caller's role. Guards compose with any
route through Depends().
"""
from typing import Optional

from fastapi import Depends, Header, Request

from app.core.exceptions import Forbidden, InvalidSession, Unauthenticated
from app.core.security import SessionIdentity, validate_session
from app.models.user import UserType
from app.services.job_store import JobStore
from app.services.lifecycle import ApplicationLifecycle
from app.services.notifications import NotificationDispatcher

BEARER_PREFIX = "Bearer "


def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None)
) -> SessionIdentity:
    """Resolve the caller from the Authorization header"""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthenticated("Authentication required")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise Unauthenticated("Authentication required")

    try:
        identity = validate_session(token)
    except InvalidSession:
        raise Unauthenticated("Invalid token")

    request.state.identity = identity
    return identity


def require_role(role: UserType):
    """Guard that only lets callers with the given role through"""
    label = "Employers" if role == UserType.EMPLOYER else "Job seekers"

    def guard(identity: SessionIdentity = Depends(get_current_identity)) -> SessionIdentity:
        if identity.role != role.value:
            raise Forbidden(f"Access denied. {label} only.")
        return identity

    return guard


require_employer = require_role(UserType.EMPLOYER)
require_job_seeker = require_role(UserType.JOB_SEEKER)


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_job_store(dispatcher: NotificationDispatcher = Depends(get_dispatcher)) -> JobStore:
    return JobStore(dispatcher)


def get_lifecycle(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher)
) -> ApplicationLifecycle:
    return ApplicationLifecycle(dispatcher)
