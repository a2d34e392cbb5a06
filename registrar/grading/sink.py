"""Where lifecycle events are reported once an operation has committed."""

from __future__ import annotations

import typing as t

import registrar.storage.log as log_storage
from registrar.model import UserID
from registrar.storage import Session


class LogSink(t.Protocol):
    def record(
        self,
        actor_id: UserID,
        action: str,
        details: str,
        context: dict[str, t.Any] | None = None,
    ) -> None: ...


class StorageLogSink(object):
    """Writes events to the system log table in a transaction of their own.

    `ip_address` is the requester's address as seen by the web layer and is
    stamped on every event this sink records.
    """

    def __init__(self, session: Session, ip_address: str | None = None):
        self.session = session
        self.ip_address = ip_address

    def record(
        self,
        actor_id: UserID,
        action: str,
        details: str,
        context: dict[str, t.Any] | None = None,
    ) -> None:
        tx = self.session.begin_nested() if self.session.in_transaction() else self.session.begin()
        with tx:
            log_storage.create(
                {
                    "user_id": actor_id,
                    "action": action,
                    "details": details,
                    "context": context,
                    "ip_address": self.ip_address,
                },
                session=self.session,
            )
