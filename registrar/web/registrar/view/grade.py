"""View models for grade endpoints."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from registrar.grading import EditOutcome, GradeSnapshot, HistoryPage, VerifyOutcome
from registrar.grading import snapshot
from registrar.model import CourseID, Grade, GradeEditHistory, GradeID, GradeStatus, HistoryID, UserID

# JSON booleans are not scores
ScoreInput = p.StrictFloat | p.StrictInt


class GradeCreateRequest(p.BaseModel):
    """Request to add a grade; the caller becomes its teacher."""

    student_id: UserID
    course_id: CourseID
    score: ScoreInput
    semester: str
    metadata: dict[str, t.Any] | None = None


class GradeEditRequest(p.BaseModel):
    """Fields left out are not changed."""

    score: ScoreInput | None = None
    semester: str | None = None
    metadata: dict[str, t.Any] | None = None
    status: GradeStatus | None = None
    reason: str | None = None


class GradeVerifyRequest(p.BaseModel):
    status: GradeStatus


class GradeResponse(p.BaseModel):
    grade_id: GradeID
    student_id: UserID
    course_id: CourseID
    teacher_id: UserID
    score: float
    status: GradeStatus
    semester: str
    metadata: dict[str, t.Any] | None
    create_time: datetime.datetime
    update_time: datetime.datetime

    @classmethod
    def from_model(cls, grade: Grade) -> GradeResponse:
        return cls(**grade.model_dump())


class GradeListResponse(p.BaseModel):
    grades: list[GradeResponse]
    total: int


class SnapshotResponse(p.BaseModel):
    score: float
    semester: str
    metadata: dict[str, t.Any] | None

    @classmethod
    def from_snapshot(cls, s: GradeSnapshot) -> SnapshotResponse:
        return cls(score=s.score, semester=s.semester, metadata=s.metadata)


class HistoryEntryResponse(p.BaseModel):
    history_id: HistoryID
    grade_id: GradeID
    editor_id: UserID
    edit_number: int
    old_values: SnapshotResponse
    new_values: SnapshotResponse
    reason: str
    create_time: datetime.datetime

    @classmethod
    def from_model(cls, entry: GradeEditHistory) -> HistoryEntryResponse:
        return cls(
            history_id=entry.history_id,
            grade_id=entry.grade_id,
            editor_id=entry.editor_id,
            edit_number=entry.edit_number,
            old_values=SnapshotResponse.from_snapshot(snapshot.decode(entry.old_values)),
            new_values=SnapshotResponse.from_snapshot(snapshot.decode(entry.new_values)),
            reason=entry.reason,
            create_time=entry.create_time,
        )


class GradeEditResponse(p.BaseModel):
    grade: GradeResponse
    changed: bool
    description: str
    history: HistoryEntryResponse | None = None

    @classmethod
    def from_outcome(cls, outcome: EditOutcome) -> GradeEditResponse:
        return cls(
            grade=GradeResponse.from_model(outcome.grade),
            changed=outcome.changed,
            description=outcome.description,
            history=HistoryEntryResponse.from_model(outcome.history) if outcome.history else None,
        )


class GradeVerifyResponse(p.BaseModel):
    grade: GradeResponse
    changed: bool
    edit_count: int
    is_after_edit: bool

    @classmethod
    def from_outcome(cls, outcome: VerifyOutcome) -> GradeVerifyResponse:
        return cls(
            grade=GradeResponse.from_model(outcome.grade),
            changed=outcome.changed,
            edit_count=outcome.edit_count,
            is_after_edit=outcome.is_after_edit,
        )


class HistoryListResponse(p.BaseModel):
    entries: list[HistoryEntryResponse]
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def from_page(cls, page: HistoryPage) -> HistoryListResponse:
        return cls(
            entries=[HistoryEntryResponse.from_model(e) for e in page.entries],
            total=page.total,
            page=page.page,
            limit=page.limit,
            pages=page.pages,
        )
