import enum


class DeploymentEnvironment(enum.Enum):
    Production = "production"
    Development = "development"
    Staging = "staging"
    Test = "test"
    Local = "local"


class UserRole(enum.Enum):
    Admin = "ADMIN"
    Teacher = "TEACHER"
    Student = "STUDENT"


class GradeStatus(enum.Enum):
    """PENDING until a teacher or admin reviews it; content edits send a VERIFIED grade back to PENDING"""

    Pending = "PENDING"
    Verified = "VERIFIED"
    Rejected = "REJECTED"
