from .base import WithCtime
from .id import GradeID, HistoryID, UserID


class GradeEditHistory(WithCtime):
    history_id: HistoryID
    grade_id: GradeID
    editor_id: UserID
    edit_number: int

    # encoded snapshots, see registrar.grading.snapshot
    old_values: str
    new_values: str
    reason: str
