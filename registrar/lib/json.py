"""JSON helpers shared by the JSON columns and the audit snapshot codec"""

from __future__ import annotations

import datetime
import enum
import functools
import json as pyjson
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


@functools.singledispatch
def encode(obj: t.Any) -> JSONValue:
    raise TypeError(f"Object of type {obj.__class__.__name__} is not JSON serializable")


@encode.register
def _(obj: datetime.datetime) -> str:
    return obj.isoformat()


@encode.register
def _(obj: datetime.date) -> str:
    return obj.isoformat()


@encode.register
def _(obj: enum.Enum) -> t.Any:
    return obj.value


@encode.register
def _(obj: p.BaseModel) -> t.Any:
    return obj.model_dump(mode="json")


@encode.register(set)
@encode.register(frozenset)
def _(obj: set[t.Any] | frozenset[t.Any]) -> list[t.Any]:
    return sorted(obj)


class JSONEncoder(pyjson.JSONEncoder):
    def default(self, o: t.Any) -> JSONValue:
        return encode(o)


def dumps(obj: t.Any, **kw: t.Any) -> str:
    kw.setdefault("cls", JSONEncoder)
    return pyjson.dumps(obj, **kw)


def loads(s: str | bytes | bytearray, **kw: t.Any) -> JSONValue:
    return pyjson.loads(s, **kw)


def canonical(obj: t.Any) -> str:
    """Deterministic compact encoding: sorted keys, no insignificant whitespace, no NaN"""
    return dumps(obj, ensure_ascii=False, allow_nan=False, separators=(",", ":"), sort_keys=True)
