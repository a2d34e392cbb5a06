"""Storage seam for the lifecycle manager.

`GradeRepository` is the narrow interface the manager needs; the SQL
implementation delegates to `registrar.storage` within one session.
"""

from __future__ import annotations

import typing as t

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import registrar.storage.grade as grade_storage
import registrar.storage.history as history_storage
from registrar.model import CourseID, Grade, GradeEditHistory, GradeID, GradeStatus, UserID
from registrar.storage import Session
from registrar.storage.grade import GradeCreateParams, GradeUpdateParams
from registrar.storage.history import HistoryCreateParams

from .errors import AuditDegraded, NotFound


class HistoryFilter(t.TypedDict, total=False):
    grade_id: GradeID
    editor_id: UserID
    student_id: UserID
    course_id: CourseID
    visible_to: UserID


class GradeRepository(t.Protocol):
    def transaction(self) -> t.ContextManager[t.Any]:
        """Scope in which every read and write of one operation happens atomically."""
        ...

    def get(self, grade_id: GradeID, *, for_update: bool = False) -> Grade | None: ...

    def find(
        self,
        *,
        student_id: UserID | None = None,
        teacher_id: UserID | None = None,
        course_id: CourseID | None = None,
        status: GradeStatus | None = None,
    ) -> tuple[Grade, ...]: ...

    def create(self, params: GradeCreateParams) -> Grade: ...

    def update(self, grade_id: GradeID, params: GradeUpdateParams) -> Grade: ...

    def delete(self, grade_id: GradeID) -> bool: ...

    def count_history(self, grade_id: GradeID) -> int:
        """Number of audit entries for `grade_id`; raises AuditDegraded when the trail cannot be read."""
        ...

    def insert_history(
        self, params: HistoryCreateParams, *, best_effort: bool = False
    ) -> GradeEditHistory | None:
        """Append an audit entry.

        With `best_effort`, a conflicting entry is dropped and None returned
        instead of failing the surrounding transaction.
        """
        ...

    def find_history(
        self, filters: HistoryFilter, *, limit: int | None = None, offset: int = 0
    ) -> tuple[GradeEditHistory, ...]: ...

    def count_history_matching(self, filters: HistoryFilter) -> int: ...


class SQLGradeRepository(object):
    def __init__(self, session: Session):
        self.session = session

    def transaction(self) -> t.ContextManager[t.Any]:
        if self.session.in_transaction():
            return self.session.begin_nested()
        return self.session.begin()

    def get(self, grade_id: GradeID, *, for_update: bool = False) -> Grade | None:
        return grade_storage.get(grade_id, for_update=for_update, session=self.session)

    def find(
        self,
        *,
        student_id: UserID | None = None,
        teacher_id: UserID | None = None,
        course_id: CourseID | None = None,
        status: GradeStatus | None = None,
    ) -> tuple[Grade, ...]:
        return grade_storage.find(
            student_id=student_id,
            teacher_id=teacher_id,
            course_id=course_id,
            status=status,
            session=self.session,
        )

    def create(self, params: GradeCreateParams) -> Grade:
        return grade_storage.create(params, session=self.session)

    def update(self, grade_id: GradeID, params: GradeUpdateParams) -> Grade:
        grade = grade_storage.update(grade_id, params, session=self.session)
        if grade is None:
            raise NotFound(f"grade {grade_id} does not exist")
        return grade

    def delete(self, grade_id: GradeID) -> bool:
        return grade_storage.delete(grade_id, session=self.session)

    def count_history(self, grade_id: GradeID) -> int:
        try:
            # a failed read must not poison the enclosing transaction
            with self.session.begin_nested():
                return history_storage.count_for_grade(grade_id, session=self.session)
        except SQLAlchemyError as e:
            raise AuditDegraded(f"could not count history for {grade_id}") from e

    def insert_history(
        self, params: HistoryCreateParams, *, best_effort: bool = False
    ) -> GradeEditHistory | None:
        if not best_effort:
            return history_storage.create(params, session=self.session)
        try:
            with self.session.begin_nested():
                return history_storage.create(params, session=self.session)
        except IntegrityError:
            return None

    def find_history(
        self, filters: HistoryFilter, *, limit: int | None = None, offset: int = 0
    ) -> tuple[GradeEditHistory, ...]:
        return history_storage.find(**filters, limit=limit, offset=offset, session=self.session)

    def count_history_matching(self, filters: HistoryFilter) -> int:
        return history_storage.count(**filters, session=self.session)
