from .base import BaseModel
from .enum import UserRole
from .id import UserID


class Actor(BaseModel):
    """Whoever is asking for a read or a mutation; supplied by the caller, never persisted."""

    user_id: UserID
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.Admin

    @property
    def is_teacher(self) -> bool:
        return self.role is UserRole.Teacher

    @property
    def is_student(self) -> bool:
        return self.role is UserRole.Student
