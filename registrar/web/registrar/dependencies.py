"""FastAPI dependency providers for the registrar web application."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from registrar.core import di
from registrar.core.config import GradingSettings
from registrar.grading import GradeLifecycle, SQLGradeRepository, StorageLogSink
from registrar.lib.util import client_address
from registrar.model import Actor, UserID, UserRole


def get_actor(
    actor_id: str | None = Header(None, alias="X-Actor-ID"),
    actor_role: str | None = Header(None, alias="X-Actor-Role"),
) -> Actor:
    """Identify the caller from the headers set by the upstream gateway.

    Raises:
        HTTPException 401: If either header is missing or malformed
    """
    if actor_id is None or actor_role is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return Actor(user_id=UserID(actor_id), role=UserRole(actor_role.strip().upper()))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid actor identity") from e


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator access required")
    return actor


def get_client_address(
    request: Request,
    forwarded_for: str | None = Header(None, alias="X-Forwarded-For"),
) -> str | None:
    return client_address(forwarded_for, request.client.host if request.client else None)


@di.inject
def get_grading_settings(
    settings: GradingSettings = Depends(di.Provide["config.grading", di.as_(GradingSettings)]),
) -> GradingSettings:
    """Get grading settings from DI container."""
    return settings


@di.inject
def get_lifecycle(
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    settings: GradingSettings = Depends(get_grading_settings),
    ip_address: str | None = Depends(get_client_address),
) -> GradeLifecycle:
    """Lifecycle manager bound to this request's session, stamping events with the caller's address."""
    return GradeLifecycle(
        SQLGradeRepository(session),
        StorageLogSink(session, ip_address=ip_address),
        default_reason=settings.default_reason,
        history_page_size=settings.history_page_size,
    )
