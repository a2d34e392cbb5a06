from __future__ import annotations

import typing as t

from sqlalchemy import func, or_, select
from sqlalchemy.sql import Select

from registrar.core import di
from registrar.model import CourseID, GradeEditHistory, GradeID, HistoryID, UserID

from . import Session
from .table import grade_edit_history, grades


def get(key: HistoryID, session: Session = di.Provide["storage.persistent.session"]) -> GradeEditHistory | None:
    stmt = select(grade_edit_history.__table__).where(grade_edit_history.history_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return GradeEditHistory(**row) if row else None


def count_for_grade(grade_id: GradeID, session: Session = di.Provide["storage.persistent.session"]) -> int:
    """Number of audit entries recorded for a grade, i.e. the edit_number of its latest edit"""
    stmt = select(func.count()).select_from(grade_edit_history).where(grade_edit_history.grade_id == grade_id)
    return session.execute(stmt).scalar_one()


def find(
    *,
    grade_id: GradeID | None = None,
    editor_id: UserID | None = None,
    student_id: UserID | None = None,
    course_id: CourseID | None = None,
    visible_to: UserID | None = None,
    limit: int | None = None,
    offset: int = 0,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[GradeEditHistory, ...]:
    """Newest first.

    `visible_to` restricts results to entries the user made or entries on
    grades the user authored.
    """
    stmt = _filter(
        select(grade_edit_history.__table__),
        grade_id=grade_id,
        editor_id=editor_id,
        student_id=student_id,
        course_id=course_id,
        visible_to=visible_to,
    )
    stmt = stmt.order_by(
        grade_edit_history.create_time.desc(), grade_edit_history.edit_number.desc(), grade_edit_history.history_id
    ).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = session.execute(stmt).mappings().all()
    return tuple(GradeEditHistory(**row) for row in rows)


def count(
    *,
    grade_id: GradeID | None = None,
    editor_id: UserID | None = None,
    student_id: UserID | None = None,
    course_id: CourseID | None = None,
    visible_to: UserID | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> int:
    stmt = _filter(
        select(func.count()).select_from(grade_edit_history),
        grade_id=grade_id,
        editor_id=editor_id,
        student_id=student_id,
        course_id=course_id,
        visible_to=visible_to,
    )
    return session.execute(stmt).scalar_one()


def create(
    params: HistoryCreateParams, session: Session = di.Provide["storage.persistent.session"]
) -> GradeEditHistory:
    entry = grade_edit_history(
        history_id=HistoryID(),
        grade_id=params["grade_id"],
        editor_id=params["editor_id"],
        edit_number=params["edit_number"],
        old_values=params["old_values"],
        new_values=params["new_values"],
        reason=params["reason"],
    )
    session.add(entry)
    session.flush()
    return get(entry.history_id, session=session)  # type: ignore


def _filter(
    stmt: Select[t.Any],
    *,
    grade_id: GradeID | None,
    editor_id: UserID | None,
    student_id: UserID | None,
    course_id: CourseID | None,
    visible_to: UserID | None,
) -> Select[t.Any]:
    if student_id is not None or course_id is not None or visible_to is not None:
        # history outlives its grade, so entries of deleted grades only
        # survive filters that do not need the grade
        stmt = stmt.outerjoin(grades, grades.grade_id == grade_edit_history.grade_id)
    if grade_id is not None:
        stmt = stmt.where(grade_edit_history.grade_id == grade_id)
    if editor_id is not None:
        stmt = stmt.where(grade_edit_history.editor_id == editor_id)
    if student_id is not None:
        stmt = stmt.where(grades.student_id == student_id)
    if course_id is not None:
        stmt = stmt.where(grades.course_id == course_id)
    if visible_to is not None:
        stmt = stmt.where(or_(grade_edit_history.editor_id == visible_to, grades.teacher_id == visible_to))
    return stmt


class HistoryCreateParams(t.TypedDict):
    grade_id: GradeID
    editor_id: UserID
    edit_number: int
    old_values: str
    new_values: str
    reason: str
