"""Exceptions for grade lifecycle operations.

Each kind maps to one response class at the caller boundary (404, 400, 403);
messages are safe to show and never carry storage-layer detail.
"""


class GradingError(Exception):
    """Error during a grade lifecycle operation."""

    pass


class NotFound(GradingError):
    """The referenced grade does not exist."""

    pass


class ValidationError(GradingError):
    """Score out of range, malformed metadata, or an unusable status."""

    pass


class InvalidTransition(ValidationError):
    """The requested status change is not an edge the actor may take."""

    pass


class PermissionDenied(GradingError):
    """The actor's role or ownership does not allow the operation."""

    pass


class AuditDegraded(GradingError):
    """The audit trail could not be consulted; never surfaced to callers."""

    pass
