from __future__ import annotations

import typing as t

from sqlalchemy import delete as sql_delete
from sqlalchemy import select

from registrar.core import di
from registrar.model import CourseID, Grade, GradeID, GradeStatus, UserID

from . import Session
from .table import grades

# the metadata column is stored as grade_metadata; hand it back under the model's name
_columns = (
    *(c for c in grades.__table__.c if c.key != "grade_metadata"),
    grades.__table__.c.grade_metadata.label("metadata"),
)


def get(
    key: GradeID,
    *,
    for_update: bool = False,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade | None:
    stmt = select(*_columns).where(grades.grade_id == key)
    if for_update:
        stmt = stmt.with_for_update()
    row = session.execute(stmt).mappings().one_or_none()
    return Grade(**row) if row else None


def find(
    *,
    student_id: UserID | None = None,
    teacher_id: UserID | None = None,
    course_id: CourseID | None = None,
    status: GradeStatus | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Grade, ...]:
    stmt = select(*_columns).order_by(grades.update_time.desc(), grades.grade_id)
    if student_id is not None:
        stmt = stmt.where(grades.student_id == student_id)
    if teacher_id is not None:
        stmt = stmt.where(grades.teacher_id == teacher_id)
    if course_id is not None:
        stmt = stmt.where(grades.course_id == course_id)
    if status is not None:
        stmt = stmt.where(grades.status == status.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(Grade(**row) for row in rows)


def create(params: GradeCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Grade:
    grade = grades(
        grade_id=GradeID(),
        student_id=params["student_id"],
        course_id=params["course_id"],
        teacher_id=params["teacher_id"],
        score=params["score"],
        semester=params["semester"],
        status=params.get("status", GradeStatus.Pending).value,
        grade_metadata=params.get("metadata"),
    )
    session.add(grade)
    session.flush()
    return get(grade.grade_id, session=session)  # type: ignore


def update(
    key: GradeID,
    params: GradeUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Grade | None:
    """Apply every key present in `params`; absent keys are left alone, a present None is written"""
    stmt = select(grades).where(grades.grade_id == key)
    grade = session.execute(stmt).scalar_one_or_none()
    if grade is None:
        return None
    for field, value in params.items():
        match field:
            case "status":
                grade.status = t.cast(GradeStatus, value).value
            case "metadata":
                grade.grade_metadata = t.cast(dict[str, t.Any] | None, value)
            case _:
                setattr(grade, field, value)
    session.flush()
    return get(key, session=session)


def delete(key: GradeID, session: Session = di.Provide["storage.persistent.session"]) -> bool:
    result = session.execute(sql_delete(grades).where(grades.grade_id == key))
    return bool(result.rowcount)  # pyright: ignore [reportAttributeAccessIssue]


class GradeCreateParams(t.TypedDict, total=False):
    student_id: t.Required[UserID]
    course_id: t.Required[CourseID]
    teacher_id: t.Required[UserID]
    score: t.Required[float]
    semester: t.Required[str]
    status: GradeStatus
    metadata: dict[str, t.Any] | None


class GradeUpdateParams(t.TypedDict, total=False):
    score: float
    semester: str
    metadata: dict[str, t.Any] | None
    status: GradeStatus
