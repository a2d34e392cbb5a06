import typing as t

import annotated_types as ant

from .base import WithTimestamps
from .enum import GradeStatus
from .id import CourseID, GradeID, UserID

MinScore: t.Final[float] = 0.0
MaxScore: t.Final[float] = 100.0

Score = t.Annotated[float, ant.Ge(MinScore), ant.Le(MaxScore)]


class Grade(WithTimestamps):
    grade_id: GradeID
    student_id: UserID
    course_id: CourseID
    teacher_id: UserID

    score: Score
    status: GradeStatus = GradeStatus.Pending
    semester: str
    metadata: dict[str, t.Any] | None = None
