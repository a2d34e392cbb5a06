__all__ = [
    # Errors
    "AuditDegraded",
    "GradingError",
    "InvalidTransition",
    "NotFound",
    "PermissionDenied",
    "ValidationError",
    # Lifecycle
    "CallerProvidedStatus",
    "ComputedStatus",
    "EditOutcome",
    "GradeLifecycle",
    "HistoryPage",
    "StatusDirective",
    "VerifyOutcome",
    # Seams
    "GradeRepository",
    "LogSink",
    "SQLGradeRepository",
    "StorageLogSink",
    # Audit encoding
    "GradeSnapshot",
]

from .errors import AuditDegraded, GradingError, InvalidTransition, NotFound, PermissionDenied, ValidationError
from .lifecycle import (
    CallerProvidedStatus,
    ComputedStatus,
    EditOutcome,
    GradeLifecycle,
    HistoryPage,
    StatusDirective,
    VerifyOutcome,
)
from .repository import GradeRepository, SQLGradeRepository
from .sink import LogSink, StorageLogSink
from .snapshot import GradeSnapshot
