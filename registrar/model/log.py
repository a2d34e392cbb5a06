import typing as t

from .base import WithCtime
from .id import LogEntryID, UserID


class SystemLog(WithCtime):
    log_id: LogEntryID
    user_id: UserID
    action: str
    details: str
    context: dict[str, t.Any] | None = None
    ip_address: str | None = None
