"""System log routes."""

from __future__ import annotations

import datetime
import math

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from registrar.core import di
from registrar.core.config import GradingSettings
from registrar.model import Actor, UserID
from registrar.storage import log as log_storage

from ..dependencies import get_grading_settings, require_admin
from ..view.log import LogEntryResponse, LogListResponse

router = APIRouter(prefix="/api/logs", tags=["logs"])


@router.get("", operation_id="list_logs")
@di.inject
def list_logs(
    user_id: UserID | None = Query(None),
    action: str | None = Query(None),
    since: datetime.datetime | None = Query(None),
    until: datetime.datetime | None = Query(None),
    page: int = Query(1),
    limit: int | None = Query(None),
    actor: Actor = Depends(require_admin),
    settings: GradingSettings = Depends(get_grading_settings),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> LogListResponse:
    """List system log entries, newest first. Administrators only."""
    # out-of-range paging is clamped rather than rejected
    limit = min(max(settings.log_page_size if limit is None else limit, 1), 100)
    page = max(page, 1)

    with session.begin():
        total = log_storage.count(user_id=user_id, action=action, since=since, until=until, session=session)
        entries = log_storage.find(
            user_id=user_id,
            action=action,
            since=since,
            until=until,
            limit=limit,
            offset=(page - 1) * limit,
            session=session,
        )

    return LogListResponse(
        logs=[LogEntryResponse.from_model(e) for e in entries],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )
