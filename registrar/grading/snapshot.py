"""Audit trail encoding.

A snapshot captures the editable content of a grade (score, semester,
metadata). Snapshots are stored in the audit trail as canonical JSON text:
sorted keys, no insignificant whitespace. Two snapshots are equal exactly
when their canonical encodings are equal, so metadata that differs only in
key order or formatting never counts as a change.
"""

from __future__ import annotations

import typing as t

import pydantic as p

import registrar.lib.json as json
from registrar.model import BaseModel, Grade, Score

from .errors import ValidationError


class GradeSnapshot(BaseModel):
    score: Score
    semester: str
    metadata: dict[str, t.Any] | None = None

    @p.field_validator("metadata", mode="before")
    @classmethod
    def _json_native(cls, v: t.Any) -> t.Any:
        # keep only what survives a JSON round trip (tuples become lists, etc.)
        return _json_object(v)

    @classmethod
    def of(cls, grade: Grade) -> GradeSnapshot:
        return cls(score=grade.score, semester=grade.semester, metadata=grade.metadata)


def _json_object(metadata: t.Any) -> dict[str, t.Any] | None:
    if metadata is None:
        return None
    if not isinstance(metadata, dict):
        raise ValueError("metadata must be an object")
    try:
        return t.cast(dict[str, t.Any], json.loads(json.canonical(metadata)))
    except (TypeError, ValueError) as e:
        raise ValueError("metadata must be JSON-serializable") from e


def normalize_metadata(metadata: t.Any) -> dict[str, t.Any] | None:
    """Return `metadata` as plain JSON data, or raise ValidationError if it is not a JSON object."""
    try:
        return _json_object(metadata)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def encode(snapshot: GradeSnapshot) -> str:
    return json.canonical(snapshot.model_dump(mode="json"))


def decode(s: str) -> GradeSnapshot:
    """Parse a stored snapshot; a corrupt one raises pydantic.ValidationError."""
    return GradeSnapshot.model_validate_json(s)


def snapshots_equal(a: GradeSnapshot, b: GradeSnapshot) -> bool:
    return encode(a) == encode(b)


def metadata_equal(a: dict[str, t.Any] | None, b: dict[str, t.Any] | None) -> bool:
    return json.canonical(a) == json.canonical(b)


def describe_changes(old: GradeSnapshot, new: GradeSnapshot) -> list[str]:
    changes: list[str] = []
    if old.score != new.score:
        changes.append(f"score {old.score:g} -> {new.score:g}")
    if old.semester != new.semester:
        changes.append(f"semester {old.semester!r} -> {new.semester!r}")
    if not metadata_equal(old.metadata, new.metadata):
        changes.append("metadata updated")
    return changes
