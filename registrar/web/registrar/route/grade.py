"""Grade management routes."""

from __future__ import annotations

import contextlib
import typing as t

from fastapi import APIRouter, Depends, HTTPException, Query, status

from registrar.grading import GradeLifecycle, InvalidTransition, NotFound, PermissionDenied, ValidationError
from registrar.model import Actor, CourseID, GradeID, GradeStatus, UserID

from ..dependencies import get_actor, get_lifecycle
from ..view.grade import GradeCreateRequest, GradeEditRequest, GradeEditResponse, GradeListResponse, \
    GradeResponse, GradeVerifyRequest, GradeVerifyResponse, HistoryListResponse

router = APIRouter(prefix="/api/grades", tags=["grades"])


@contextlib.contextmanager
def grading_errors() -> t.Iterator[None]:
    """Translate lifecycle failures into HTTP errors with fixed messages."""
    try:
        yield
    except NotFound:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found") from None
    except InvalidTransition:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status change not allowed") from None
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid grade data") from None
    except PermissionDenied:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not permitted") from None


@router.get("", operation_id="list_grades")
def list_grades(
    course_id: CourseID | None = Query(None),
    grade_status: GradeStatus | None = Query(None, alias="status"),
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> GradeListResponse:
    """List grades visible to the caller, most recently updated first."""
    grades = lifecycle.list_grades(actor, course_id=course_id, status=grade_status)
    return GradeListResponse(grades=[GradeResponse.from_model(g) for g in grades], total=len(grades))


@router.post("", operation_id="create_grade", status_code=status.HTTP_201_CREATED)
def create_grade(
    request: GradeCreateRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> GradeResponse:
    """Add a grade authored by the calling teacher."""
    with grading_errors():
        grade = lifecycle.create_grade(
            actor,
            student_id=request.student_id,
            course_id=request.course_id,
            score=request.score,
            semester=request.semester,
            metadata=request.metadata,
        )
    return GradeResponse.from_model(grade)


@router.get("/history", operation_id="list_grade_history")
def list_history(
    grade_id: GradeID | None = Query(None),
    student_id: UserID | None = Query(None),
    course_id: CourseID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> HistoryListResponse:
    """List audit entries visible to the caller, newest first."""
    result = lifecycle.list_history(
        actor, grade_id=grade_id, student_id=student_id, course_id=course_id, page=page, limit=limit
    )
    return HistoryListResponse.from_page(result)


@router.get("/{grade_id}", operation_id="get_grade")
def get_grade(
    grade_id: GradeID,
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> GradeResponse:
    with grading_errors():
        grade = lifecycle.get(actor, grade_id)
    return GradeResponse.from_model(grade)


@router.patch("/{grade_id}", operation_id="edit_grade")
def edit_grade(
    grade_id: GradeID,
    request: GradeEditRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> GradeEditResponse:
    """Edit a grade's score, semester, metadata or status.

    Edits that change nothing are accepted and leave no audit entry.
    """
    with grading_errors():
        outcome = lifecycle.request_edit(
            actor,
            grade_id,
            score=request.score,
            semester=request.semester,
            metadata=request.metadata,
            status=request.status,
            reason=request.reason,
        )
    return GradeEditResponse.from_outcome(outcome)


@router.post("/{grade_id}/verify", operation_id="verify_grade")
def verify_grade(
    grade_id: GradeID,
    request: GradeVerifyRequest,
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> GradeVerifyResponse:
    """Mark a grade VERIFIED or REJECTED."""
    with grading_errors():
        outcome = lifecycle.verify(actor, grade_id, request.status)
    return GradeVerifyResponse.from_outcome(outcome)


@router.delete("/{grade_id}", operation_id="delete_grade", status_code=status.HTTP_204_NO_CONTENT)
def delete_grade(
    grade_id: GradeID,
    actor: Actor = Depends(get_actor),
    lifecycle: GradeLifecycle = Depends(get_lifecycle),
) -> None:
    with grading_errors():
        lifecycle.delete(actor, grade_id)
