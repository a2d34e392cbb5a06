"""View models for system log endpoints."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from registrar.model import LogEntryID, SystemLog, UserID


class LogEntryResponse(p.BaseModel):
    log_id: LogEntryID
    user_id: UserID
    action: str
    details: str
    context: dict[str, t.Any] | None
    ip_address: str | None
    create_time: datetime.datetime

    @classmethod
    def from_model(cls, entry: SystemLog) -> LogEntryResponse:
        return cls(**entry.model_dump())


class LogListResponse(p.BaseModel):
    logs: list[LogEntryResponse]
    total: int
    page: int
    limit: int
    pages: int
