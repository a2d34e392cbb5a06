"""View models for the registrar web application."""

__all__ = [
    # Grade views
    "GradeCreateRequest",
    "GradeEditRequest",
    "GradeEditResponse",
    "GradeListResponse",
    "GradeResponse",
    "GradeVerifyRequest",
    "GradeVerifyResponse",
    "HistoryEntryResponse",
    "HistoryListResponse",
    "SnapshotResponse",
    # Log views
    "LogEntryResponse",
    "LogListResponse",
]

from .grade import GradeCreateRequest, GradeEditRequest, GradeEditResponse, GradeListResponse, GradeResponse, \
    GradeVerifyRequest, GradeVerifyResponse, HistoryEntryResponse, HistoryListResponse, SnapshotResponse
from .log import LogEntryResponse, LogListResponse
