__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    "GradeStatus",
    "UserRole",
    # ID Types
    "UserID",
    "CourseID",
    "GradeID",
    "HistoryID",
    "LogEntryID",
    # Users
    "Actor",
    # Grades
    "Grade",
    "MaxScore",
    "MinScore",
    "Score",
    # Audit
    "GradeEditHistory",
    "SystemLog",
]

from .base import BaseModel, WithCtime, WithTimestamps
from .enum import DeploymentEnvironment, GradeStatus, UserRole
from .grade import Grade, MaxScore, MinScore, Score
from .history import GradeEditHistory
from .id import CourseID, GradeID, HistoryID, LogEntryID, UserID
from .log import SystemLog
from .user import Actor
