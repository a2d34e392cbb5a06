"""Prefixed short-UUID identifiers.

Every record key reads `<prefix>$<shortuuid>`, e.g. `grad$Fq4...`, so an ID
names its own kind. Only the 22-character shortuuid part is stored.
"""

from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KeyLength: t.Final[int] = 22


class ShortUUIDKey(str):
    prefix: t.ClassVar[str]
    separator: t.ClassVar[str] = "$"

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4, 4)]):
        super().__init_subclass__()
        cls.prefix = prefix

    def __new__(cls, s: str | None = None, /, key: str | None = None) -> t.Self:
        """`cls()` mints a new key, `cls(s)` checks a full prefixed key, `cls(key=k)` trusts a stored key part"""
        if key is None:
            key = shortuuid.uuid() if s is None else cls.parse(s)
        return super().__new__(cls, f"{cls.prefix}{cls.separator}{key}")

    @classmethod
    def parse(cls, s: str) -> str:
        """Return the key part of `s`, raising ValueError unless it is one of ours"""
        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {head}")
        key = s[len(head) :]
        if len(key) != KeyLength:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KeyLength}")
        alphabet = shortuuid.get_alphabet()
        if not set(key) <= set(alphabet):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return key

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str = core_schema.no_info_after_validator_function(cls, core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {"type": "string", "pattern": rf"^{cls.prefix}\{cls.separator}[0-9A-Za-z]{{{KeyLength}}}$"}

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key}>"


# fmt: off
class UserID(ShortUUIDKey, prefix="user"): ...
class CourseID(ShortUUIDKey, prefix="crse"): ...
class GradeID(ShortUUIDKey, prefix="grad"): ...
class HistoryID(ShortUUIDKey, prefix="hist"): ...
class LogEntryID(ShortUUIDKey, prefix="slog"): ...
