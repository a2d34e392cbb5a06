from __future__ import annotations

import datetime
import typing as t

from sqlalchemy import func, select
from sqlalchemy.sql import Select

from registrar.core import di
from registrar.model import LogEntryID, SystemLog, UserID

from . import Session
from .table import system_logs


def get(key: LogEntryID, session: Session = di.Provide["storage.persistent.session"]) -> SystemLog | None:
    stmt = select(system_logs.__table__).where(system_logs.log_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return SystemLog(**row) if row else None


def find(
    *,
    user_id: UserID | None = None,
    action: str | None = None,
    since: datetime.datetime | None = None,
    until: datetime.datetime | None = None,
    limit: int | None = None,
    offset: int = 0,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[SystemLog, ...]:
    stmt = _filter(select(system_logs.__table__), user_id=user_id, action=action, since=since, until=until)
    stmt = stmt.order_by(system_logs.create_time.desc(), system_logs.log_id).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = session.execute(stmt).mappings().all()
    return tuple(SystemLog(**row) for row in rows)


def count(
    *,
    user_id: UserID | None = None,
    action: str | None = None,
    since: datetime.datetime | None = None,
    until: datetime.datetime | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    stmt = _filter(
        select(func.count()).select_from(system_logs), user_id=user_id, action=action, since=since, until=until
    )
    return session.execute(stmt).scalar_one()


def create(params: LogCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> SystemLog:
    entry = system_logs(
        log_id=LogEntryID(),
        user_id=params["user_id"],
        action=params["action"],
        details=params["details"],
        context=params.get("context"),
        ip_address=params.get("ip_address"),
    )
    session.add(entry)
    session.flush()
    return get(entry.log_id, session=session)  # type: ignore


def _filter(
    stmt: Select[t.Any],
    *,
    user_id: UserID | None,
    action: str | None,
    since: datetime.datetime | None,
    until: datetime.datetime | None,
) -> Select[t.Any]:
    if user_id is not None:
        stmt = stmt.where(system_logs.user_id == user_id)
    if action is not None:
        stmt = stmt.where(system_logs.action == action)
    if since is not None:
        stmt = stmt.where(system_logs.create_time >= since)
    if until is not None:
        stmt = stmt.where(system_logs.create_time <= until)
    return stmt


class LogCreateParams(t.TypedDict, total=False):
    user_id: t.Required[UserID]
    action: t.Required[str]
    details: t.Required[str]
    context: dict[str, t.Any] | None
    ip_address: str | None
