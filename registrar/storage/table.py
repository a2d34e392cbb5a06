import datetime
import typing as t

from sqlalchemy import CheckConstraint, func, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime, Float, String, Text

from registrar.lib.util import MaxAddressLength
from registrar.model import CourseID, GradeID, HistoryID, LogEntryID, MaxScore, MinScore, UserID

from .type import JSONType, ShortUUIDKeyType


class base(MappedAsDataclass, DeclarativeBase):
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        CourseID: ShortUUIDKeyType(CourseID),
        GradeID: ShortUUIDKeyType(GradeID),
        HistoryID: ShortUUIDKeyType(HistoryID),
        LogEntryID: ShortUUIDKeyType(LogEntryID),
        datetime.datetime: DateTime(timezone=True),
    }


# Grades

# student, course and teacher live in other services; only their ids are kept


class grades(base):
    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint(f"score >= {MinScore} AND score <= {MaxScore}", name="grades_score_range"),
    )

    grade_id: Mapped[GradeID] = mapped_column(primary_key=True)
    student_id: Mapped[UserID] = mapped_column(index=True)
    course_id: Mapped[CourseID] = mapped_column(index=True)
    teacher_id: Mapped[UserID] = mapped_column(index=True)
    score: Mapped[float] = mapped_column(Float)
    semester: Mapped[str]
    status: Mapped[str] = mapped_column(String(16), default="PENDING")
    # `metadata` is reserved by the declarative base
    grade_metadata: Mapped[dict[str, t.Any] | None] = mapped_column(JSONType, default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


# Audit trail; rows are never updated or deleted, and outlive their grade


class grade_edit_history(base):
    __tablename__ = "grade_edit_history"
    __table_args__ = (UniqueConstraint("grade_id", "edit_number", name="grade_edit_history_grade_id_edit_number_key"),)

    history_id: Mapped[HistoryID] = mapped_column(primary_key=True)
    grade_id: Mapped[GradeID] = mapped_column(index=True)
    editor_id: Mapped[UserID] = mapped_column(index=True)
    edit_number: Mapped[int]
    old_values: Mapped[str] = mapped_column(Text)
    new_values: Mapped[str] = mapped_column(Text)
    reason: Mapped[str] = mapped_column(Text)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


# System log


class system_logs(base):
    __tablename__ = "system_logs"

    log_id: Mapped[LogEntryID] = mapped_column(primary_key=True)
    user_id: Mapped[UserID] = mapped_column(index=True)
    action: Mapped[str] = mapped_column(String(64), index=True)
    details: Mapped[str] = mapped_column(Text)
    context: Mapped[dict[str, t.Any] | None] = mapped_column(JSONType, default=None)
    ip_address: Mapped[str | None] = mapped_column(String(MaxAddressLength), default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), index=True)


metadata = base.metadata
