"""Grade lifecycle manager.

Every change to a grade goes through `GradeLifecycle`: permission and input
checks happen first, then the read, audit numbering and writes of one
operation run inside a single repository transaction, and only after that
transaction commits is the event reported to the log sink.

Status moves along these edges:

    PENDING  -> VERIFIED | REJECTED   owning teacher or admin
    VERIFIED -> PENDING               automatic, when score/semester/metadata change
    any      -> any                   admin, by explicit request
"""

from __future__ import annotations

import logging
import math
import typing as t

import pydantic as p

from registrar.model import (
    Actor,
    BaseModel,
    CourseID,
    Grade,
    GradeEditHistory,
    GradeID,
    GradeStatus,
    MaxScore,
    MinScore,
    UserID,
    UserRole,
)
from registrar.storage.grade import GradeUpdateParams

from . import policy, snapshot
from .errors import AuditDegraded, InvalidTransition, NotFound, PermissionDenied, ValidationError
from .repository import GradeRepository, HistoryFilter
from .sink import LogSink
from .snapshot import GradeSnapshot

logger = logging.getLogger(__name__)

DefaultReason = "routine update"
MaxPageSize = 100


class ComputedStatus(BaseModel):
    """Keep the current status, subject to the re-review rule."""

    kind: t.Literal["computed"] = "computed"


class CallerProvidedStatus(BaseModel):
    """Status named explicitly by the caller; unconditional for admins."""

    kind: t.Literal["provided"] = "provided"
    status: GradeStatus


StatusDirective = t.Annotated[ComputedStatus | CallerProvidedStatus, p.Field(discriminator="kind")]


class EditOutcome(BaseModel):
    grade: Grade
    changed: bool
    description: str
    history: GradeEditHistory | None = None
    audit_degraded: bool = False


class VerifyOutcome(BaseModel):
    grade: Grade
    changed: bool
    edit_count: int

    @property
    def is_after_edit(self) -> bool:
        return self.edit_count > 0


class HistoryPage(BaseModel):
    entries: list[GradeEditHistory]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0


class GradeLifecycle(object):
    def __init__(
        self,
        repository: GradeRepository,
        sink: LogSink,
        *,
        default_reason: str = DefaultReason,
        history_page_size: int = 10,
    ):
        self.repository = repository
        self.sink = sink
        self.default_reason = default_reason
        self.history_page_size = history_page_size

    def request_edit(
        self,
        actor: Actor,
        grade_id: GradeID,
        *,
        score: float | None = None,
        semester: str | None = None,
        metadata: dict[str, t.Any] | None = None,
        status: GradeStatus | None = None,
        reason: str | None = None,
    ) -> EditOutcome:
        """Apply an edit to a grade's content and/or status.

        Arguments left as None are not changed. An edit whose values all match
        the stored grade, and which asks for no status change, writes nothing
        and records no audit entry. A content change to a VERIFIED grade sends
        it back to PENDING regardless of any requested status.
        """
        directive: StatusDirective = ComputedStatus() if status is None else CallerProvidedStatus(status=status)

        if actor.is_student:
            raise PermissionDenied("students may not edit grades")
        if score is not None:
            _check_score(score)
        if metadata is not None:
            metadata = snapshot.normalize_metadata(metadata)
        reason = (reason or "").strip() or self.default_reason

        with self.repository.transaction():
            grade = self.repository.get(grade_id, for_update=True)
            if grade is None:
                raise NotFound(f"grade {grade_id} does not exist")
            if not policy.can_edit(actor, grade):
                raise PermissionDenied("only the grade's teacher or an admin may edit it")

            before = GradeSnapshot.of(grade)
            after = GradeSnapshot(
                score=before.score if score is None else score,
                semester=before.semester if semester is None else semester,
                metadata=before.metadata if metadata is None else metadata,
            )
            content_changed = not snapshot.snapshots_equal(before, after)
            target = self._resolve_status(actor, grade, directive, content_changed)

            if not content_changed and target is grade.status:
                logger.debug("edit changes nothing", extra={"grade_id": grade_id, "editor_id": actor.user_id})
                return EditOutcome(grade=grade, changed=False, description=f"grade {grade_id} unchanged")

            params: GradeUpdateParams = {}
            if after.score != before.score:
                params["score"] = after.score
            if after.semester != before.semester:
                params["semester"] = after.semester
            if not snapshot.metadata_equal(after.metadata, before.metadata):
                params["metadata"] = after.metadata
            if target is not grade.status:
                params["status"] = target
            updated = self.repository.update(grade_id, params)

            entry: GradeEditHistory | None = None
            degraded = False
            if content_changed:
                entry, degraded = self._append_history(actor, grade_id, before, after, reason)

        changes = snapshot.describe_changes(before, after)
        if target is not grade.status:
            changes.append(f"status {grade.status.value} -> {target.value}")
        description = f"{actor.role.value} {actor.user_id} edited grade {grade_id}: {'; '.join(changes)}"
        if entry is not None:
            description += f" (edit #{entry.edit_number})"

        logger.info(
            "grade edited",
            extra={
                "grade_id": grade_id,
                "editor_id": actor.user_id,
                "edit_number": entry.edit_number if entry else None,
                "status": updated.status.value,
            },
        )
        self._emit(
            actor,
            "grade.edit",
            description,
            {
                "grade_id": grade_id,
                "edit_number": entry.edit_number if entry else None,
                "old": before.model_dump(mode="json"),
                "new": after.model_dump(mode="json"),
                "status": updated.status.value,
                "reason": reason,
                "audit_degraded": degraded,
            },
        )
        return EditOutcome(
            grade=updated, changed=True, description=description, history=entry, audit_degraded=degraded
        )

    def create_grade(
        self,
        actor: Actor,
        *,
        student_id: UserID,
        course_id: CourseID,
        score: float,
        semester: str,
        metadata: dict[str, t.Any] | None = None,
    ) -> Grade:
        if not policy.can_create(actor):
            raise PermissionDenied("only teachers may add grades")
        _check_score(score)
        metadata = snapshot.normalize_metadata(metadata)

        with self.repository.transaction():
            grade = self.repository.create({
                "student_id": student_id,
                "course_id": course_id,
                "teacher_id": actor.user_id,
                "score": float(score),
                "semester": semester,
                "metadata": metadata,
            })

        logger.info("grade created", extra={"grade_id": grade.grade_id, "teacher_id": actor.user_id})
        self._emit(
            actor,
            "grade.create",
            f"{actor.role.value} {actor.user_id} added grade {grade.grade_id} "
            f"for student {student_id} in course {course_id}: {grade.score:g} ({semester})",
            {"grade_id": grade.grade_id, "student_id": student_id, "course_id": course_id},
        )
        return grade

    def verify(self, actor: Actor, grade_id: GradeID, status: GradeStatus) -> VerifyOutcome:
        """Settle a grade as VERIFIED or REJECTED."""
        if status is GradeStatus.Pending:
            raise ValidationError("verification must settle a grade as VERIFIED or REJECTED")

        with self.repository.transaction():
            grade = self.repository.get(grade_id, for_update=True)
            if grade is None:
                raise NotFound(f"grade {grade_id} does not exist")
            if not policy.can_verify(actor, grade):
                raise PermissionDenied("only the grade's teacher or an admin may verify it")
            if grade.status is status:
                return VerifyOutcome(grade=grade, changed=False, edit_count=self._edit_count(grade_id))
            if not policy.can_transition(actor, grade, status):
                raise InvalidTransition(f"cannot move grade from {grade.status.value} to {status.value}")
            updated = self.repository.update(grade_id, {"status": status})
            edit_count = self._edit_count(grade_id)

        outcome = VerifyOutcome(grade=updated, changed=True, edit_count=edit_count)
        description = f"{actor.role.value} {actor.user_id} marked grade {grade_id} {status.value}"
        if outcome.is_after_edit:
            description += f" after edit #{edit_count}"

        logger.info("grade verified", extra={"grade_id": grade_id, "status": status.value})
        self._emit(
            actor,
            "grade.verify",
            description,
            {"grade_id": grade_id, "from": grade.status.value, "to": status.value, "edit_count": edit_count},
        )
        return outcome

    def delete(self, actor: Actor, grade_id: GradeID) -> Grade:
        with self.repository.transaction():
            grade = self.repository.get(grade_id, for_update=True)
            if grade is None:
                raise NotFound(f"grade {grade_id} does not exist")
            if not policy.can_delete(actor, grade):
                raise PermissionDenied("only the grade's teacher or an admin may delete it")
            self.repository.delete(grade_id)

        logger.info("grade deleted", extra={"grade_id": grade_id})
        self._emit(
            actor,
            "grade.delete",
            f"{actor.role.value} {actor.user_id} deleted grade {grade_id} "
            f"of student {grade.student_id} in course {grade.course_id}",
            {"grade_id": grade_id, "snapshot": GradeSnapshot.of(grade).model_dump(mode="json")},
        )
        return grade

    def get(self, actor: Actor, grade_id: GradeID) -> Grade:
        with self.repository.transaction():
            grade = self.repository.get(grade_id)
        if grade is None:
            raise NotFound(f"grade {grade_id} does not exist")
        if not policy.can_view(actor, grade):
            raise PermissionDenied("grade is not visible to this user")
        return grade

    def list_grades(
        self,
        actor: Actor,
        *,
        course_id: CourseID | None = None,
        status: GradeStatus | None = None,
    ) -> tuple[Grade, ...]:
        """Grades visible to `actor`, most recently updated first."""
        with self.repository.transaction():
            match actor.role:
                case UserRole.Admin:
                    return self.repository.find(course_id=course_id, status=status)
                case UserRole.Teacher:
                    return self.repository.find(teacher_id=actor.user_id, course_id=course_id, status=status)
                case UserRole.Student:
                    return self.repository.find(student_id=actor.user_id, course_id=course_id, status=status)

    def list_history(
        self,
        actor: Actor,
        *,
        grade_id: GradeID | None = None,
        student_id: UserID | None = None,
        course_id: CourseID | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> HistoryPage:
        """Audit entries visible to `actor`, newest first.

        Admins see every entry; anyone else sees the entries they made and the
        entries on grades they authored.
        """
        limit = min(max(self.history_page_size if limit is None else limit, 1), MaxPageSize)
        page = max(page, 1)

        filters: HistoryFilter = {}
        if grade_id is not None:
            filters["grade_id"] = grade_id
        if student_id is not None:
            filters["student_id"] = student_id
        if course_id is not None:
            filters["course_id"] = course_id
        if not actor.is_admin:
            filters["visible_to"] = actor.user_id

        with self.repository.transaction():
            total = self.repository.count_history_matching(filters)
            entries = self.repository.find_history(filters, limit=limit, offset=(page - 1) * limit)
        return HistoryPage(entries=list(entries), total=total, page=page, limit=limit)

    def _resolve_status(
        self,
        actor: Actor,
        grade: Grade,
        directive: StatusDirective,
        content_changed: bool,
    ) -> GradeStatus:
        if content_changed and grade.status is GradeStatus.Verified:
            # changed content must be reviewed again, whatever was asked for
            return GradeStatus.Pending

        match directive:
            case CallerProvidedStatus(status=requested):
                if not policy.can_transition(actor, grade, requested):
                    raise InvalidTransition(f"cannot move grade from {grade.status.value} to {requested.value}")
                return requested
            case ComputedStatus():
                return grade.status

    def _append_history(
        self,
        actor: Actor,
        grade_id: GradeID,
        before: GradeSnapshot,
        after: GradeSnapshot,
        reason: str,
    ) -> tuple[GradeEditHistory | None, bool]:
        degraded = False
        try:
            edit_number = self.repository.count_history(grade_id) + 1
        except AuditDegraded:
            logger.warning(
                "audit trail unavailable; recording edit as #1",
                exc_info=True,
                extra={"grade_id": grade_id},
            )
            edit_number, degraded = 1, True

        entry = self.repository.insert_history(
            {
                "grade_id": grade_id,
                "editor_id": actor.user_id,
                "edit_number": edit_number,
                "old_values": snapshot.encode(before),
                "new_values": snapshot.encode(after),
                "reason": reason,
            },
            best_effort=degraded,
        )
        if entry is None:
            logger.error(
                "audit entry #%d conflicts with an existing entry and was dropped",
                edit_number,
                extra={"grade_id": grade_id, "editor_id": actor.user_id},
            )
        return entry, degraded

    def _edit_count(self, grade_id: GradeID) -> int:
        try:
            return self.repository.count_history(grade_id)
        except AuditDegraded:
            logger.warning("audit trail unavailable; reporting no edits", exc_info=True, extra={"grade_id": grade_id})
            return 0

    def _emit(self, actor: Actor, action: str, details: str, context: dict[str, t.Any]) -> None:
        try:
            self.sink.record(actor.user_id, action, details, context)
        except Exception:
            logger.exception("log sink failed to record %s", action, extra={"actor_id": actor.user_id})


def _check_score(score: float) -> None:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValidationError("score must be a number")
    # written so that NaN fails too
    if not (MinScore <= score <= MaxScore):
        raise ValidationError(f"score must be between {MinScore:g} and {MaxScore:g}")
