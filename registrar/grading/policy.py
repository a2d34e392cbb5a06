"""Who may do what to a grade.

Pure predicates; the lifecycle manager consults them before touching storage.
Students never satisfy a mutation predicate; reads are scoped by `can_view`
and by the role-scoped listings.
"""

from registrar.model import Actor, Grade, GradeStatus


def owns(actor: Actor, grade: Grade) -> bool:
    return actor.is_teacher and actor.user_id == grade.teacher_id


def can_verify(actor: Actor, grade: Grade) -> bool:
    return actor.is_admin or owns(actor, grade)


def can_edit(actor: Actor, grade: Grade) -> bool:
    # edit and verify share the authorization rule
    return can_verify(actor, grade)


def can_delete(actor: Actor, grade: Grade) -> bool:
    return actor.is_admin or owns(actor, grade)


def can_view(actor: Actor, grade: Grade) -> bool:
    if actor.is_student:
        return actor.user_id == grade.student_id
    return can_verify(actor, grade)


def can_create(actor: Actor) -> bool:
    return actor.is_teacher


# edges a grade's owning teacher may take explicitly; admins may set any status
TeacherTransitions: frozenset[tuple[GradeStatus, GradeStatus]] = frozenset({
    (GradeStatus.Pending, GradeStatus.Verified),
    (GradeStatus.Pending, GradeStatus.Rejected),
})


def can_transition(actor: Actor, grade: Grade, target: GradeStatus) -> bool:
    """Whether `actor` may move `grade` to `target` by explicit request.

    Staying put is always allowed for anyone who may verify.
    """
    if not can_verify(actor, grade):
        return False
    if actor.is_admin or grade.status is target:
        return True
    return (grade.status, target) in TeacherTransitions
