"""Fixtures for lifecycle tests that run without a database."""

from __future__ import annotations

import contextlib
import datetime
import itertools
import threading
import typing as t

import pytest

from registrar.grading import AuditDegraded, GradeLifecycle, NotFound
from registrar.grading.repository import HistoryFilter
from registrar.model import Actor, CourseID, Grade, GradeEditHistory, GradeID, GradeStatus, HistoryID, UserID
from registrar.storage.grade import GradeCreateParams, GradeUpdateParams
from registrar.storage.history import HistoryCreateParams


class DuplicateEditNumber(Exception):
    pass


class InMemoryGradeRepository(object):
    """Dict-backed repository.

    `transaction()` holds one lock for its whole extent, as a row lock would,
    and restores the previous state when the block raises.
    """

    def __init__(self) -> None:
        self.grades: dict[GradeID, Grade] = {}
        self.history: list[GradeEditHistory] = []
        self.lock = threading.RLock()
        self.fail_history_count = False
        self._ticks = itertools.count()

    def now(self) -> datetime.datetime:
        return datetime.datetime(2025, 9, 1, tzinfo=datetime.UTC) + datetime.timedelta(seconds=next(self._ticks))

    @contextlib.contextmanager
    def transaction(self) -> t.Iterator[None]:
        with self.lock:
            grades, history = dict(self.grades), list(self.history)
            try:
                yield
            except BaseException:
                self.grades, self.history = grades, history
                raise

    def get(self, grade_id: GradeID, *, for_update: bool = False) -> Grade | None:
        return self.grades.get(grade_id)

    def find(
        self,
        *,
        student_id: UserID | None = None,
        teacher_id: UserID | None = None,
        course_id: CourseID | None = None,
        status: GradeStatus | None = None,
    ) -> tuple[Grade, ...]:
        found = [
            g
            for g in self.grades.values()
            if (student_id is None or g.student_id == student_id)
            and (teacher_id is None or g.teacher_id == teacher_id)
            and (course_id is None or g.course_id == course_id)
            and (status is None or g.status is status)
        ]
        return tuple(sorted(found, key=lambda g: g.update_time, reverse=True))

    def create(self, params: GradeCreateParams) -> Grade:
        now = self.now()
        grade = Grade(
            grade_id=GradeID(),
            student_id=params["student_id"],
            course_id=params["course_id"],
            teacher_id=params["teacher_id"],
            score=params["score"],
            semester=params["semester"],
            status=params.get("status", GradeStatus.Pending),
            metadata=params.get("metadata"),
            create_time=now,
            update_time=now,
        )
        self.grades[grade.grade_id] = grade
        return grade

    def update(self, grade_id: GradeID, params: GradeUpdateParams) -> Grade:
        if grade_id not in self.grades:
            raise NotFound(f"grade {grade_id} does not exist")
        grade = self.grades[grade_id].model_copy(update={**params, "update_time": self.now()})
        self.grades[grade_id] = grade
        return grade

    def delete(self, grade_id: GradeID) -> bool:
        return self.grades.pop(grade_id, None) is not None

    def count_history(self, grade_id: GradeID) -> int:
        if self.fail_history_count:
            raise AuditDegraded("history store unreachable")
        return sum(1 for e in self.history if e.grade_id == grade_id)

    def insert_history(
        self, params: HistoryCreateParams, *, best_effort: bool = False
    ) -> GradeEditHistory | None:
        if any(e.grade_id == params["grade_id"] and e.edit_number == params["edit_number"] for e in self.history):
            if best_effort:
                return None
            raise DuplicateEditNumber(params["edit_number"])
        entry = GradeEditHistory(history_id=HistoryID(), create_time=self.now(), **params)
        self.history.append(entry)
        return entry

    def find_history(
        self, filters: HistoryFilter, *, limit: int | None = None, offset: int = 0
    ) -> tuple[GradeEditHistory, ...]:
        found = sorted(self._matching(filters), key=lambda e: (e.create_time, e.edit_number), reverse=True)
        end = None if limit is None else offset + limit
        return tuple(found[offset:end])

    def count_history_matching(self, filters: HistoryFilter) -> int:
        return len(self._matching(filters))

    def _matching(self, filters: HistoryFilter) -> list[GradeEditHistory]:
        def keep(e: GradeEditHistory) -> bool:
            grade = self.grades.get(e.grade_id)
            if "grade_id" in filters and e.grade_id != filters["grade_id"]:
                return False
            if "editor_id" in filters and e.editor_id != filters["editor_id"]:
                return False
            if "student_id" in filters and (grade is None or grade.student_id != filters["student_id"]):
                return False
            if "course_id" in filters and (grade is None or grade.course_id != filters["course_id"]):
                return False
            if "visible_to" in filters:
                uid = filters["visible_to"]
                return e.editor_id == uid or (grade is not None and grade.teacher_id == uid)
            return True

        return [e for e in self.history if keep(e)]


class RecordedEvent(t.NamedTuple):
    actor_id: UserID
    action: str
    details: str
    context: dict[str, t.Any] | None


class RecordingLogSink(object):
    def __init__(self) -> None:
        self.events: list[RecordedEvent] = []
        self.fail = False

    def record(
        self,
        actor_id: UserID,
        action: str,
        details: str,
        context: dict[str, t.Any] | None = None,
    ) -> None:
        if self.fail:
            raise ConnectionError("log store unreachable")
        self.events.append(RecordedEvent(actor_id, action, details, context))


@pytest.fixture
def repository() -> InMemoryGradeRepository:
    return InMemoryGradeRepository()


@pytest.fixture
def sink() -> RecordingLogSink:
    return RecordingLogSink()


@pytest.fixture
def lifecycle(repository: InMemoryGradeRepository, sink: RecordingLogSink) -> GradeLifecycle:
    return GradeLifecycle(repository, sink)


@pytest.fixture
def make_grade(repository: InMemoryGradeRepository, teacher: Actor, student: Actor) -> t.Callable[..., Grade]:
    """Factory fixture placing a grade directly in the fake repository.

    Defaults to a PENDING grade authored by `teacher` for `student`.
    """

    def create(
        score: float = 72.0,
        status: GradeStatus = GradeStatus.Pending,
        semester: str = "2025-fall",
        metadata: dict[str, t.Any] | None = None,
        teacher_id: UserID | None = None,
        student_id: UserID | None = None,
        course_id: CourseID | None = None,
    ) -> Grade:
        return repository.create({
            "student_id": student_id or student.user_id,
            "course_id": course_id or CourseID(),
            "teacher_id": teacher_id or teacher.user_id,
            "score": score,
            "semester": semester,
            "status": status,
            "metadata": metadata,
        })

    return create


@pytest.fixture
def add_history(repository: InMemoryGradeRepository) -> t.Callable[..., None]:
    """Append `count` prior audit entries for a grade."""

    def add(grade: Grade, count: int, editor_id: UserID | None = None) -> None:
        start = repository.count_history(grade.grade_id)
        for n in range(start + 1, start + count + 1):
            repository.insert_history({
                "grade_id": grade.grade_id,
                "editor_id": editor_id or grade.teacher_id,
                "edit_number": n,
                "old_values": '{"metadata":null,"score":0.0,"semester":"x"}',
                "new_values": '{"metadata":null,"score":1.0,"semester":"x"}',
                "reason": "seed",
            })

    return add
