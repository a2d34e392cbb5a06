from __future__ import annotations

import enum
import pathlib

import click
import pydantic as p
from click import *  # noqa: F401, F403 # pyright: ignore [reportWildcardImportFromLibrary]

from registrar.model.id import ShortUUIDKey

# Thin wrapper around Click: command modules import this module as `click`
# and get both Click's namespace and the parameter types below.


class EnumType(click.ParamType):
    """Parameter naming a member of `enum` by value, case-insensitively"""

    def __init__(self, enum: type[enum.Enum]):
        self.enum = enum
        self.name = enum.__name__

    def convert(
        self, value: str | enum.Enum | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> enum.Enum | None:
        if value is None or isinstance(value, self.enum):
            return value
        for member in self.enum:
            if str(member.value).lower() == value.lower():
                return member
        self.fail(f"expected one of {', '.join(str(m.value) for m in self.enum)}", param, ctx)

    def __repr__(self) -> str:
        return self.name


class KeyType(click.ParamType):
    """Parameter holding a prefixed record key such as `grad$...`"""

    def __init__(self, key_type: type[ShortUUIDKey]):
        self.key_type = key_type
        self.name = key_type.__name__

    def convert(
        self, value: str | ShortUUIDKey | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> ShortUUIDKey | None:
        if value is None or isinstance(value, self.key_type):
            return value
        try:
            return self.key_type(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


class URIParamType(click.ParamType):
    """A URI, or a filesystem path turned into a `file://` URI

    Paths must exist; directories are accepted only with `dir_ok`.
    """

    def __init__(self, dir_ok: bool = False):
        self.dir_ok = dir_ok
        self.name = "URI OR PATH"

    def convert(
        self, value: str | pathlib.Path | p.AnyUrl | None, param: click.Parameter | None, ctx: click.Context | None
    ) -> p.AnyUrl | None:
        if value is None or isinstance(value, p.AnyUrl):
            return value
        if isinstance(value, str) and "://" in value:
            return p.AnyUrl(value)

        path = pathlib.Path(value)
        if not path.exists():
            self.fail(f"{value}: no such file or directory", param, ctx)
        if path.is_dir() and not self.dir_ok:
            self.fail("directory path not accepted", param, ctx)
        return p.FileUrl(f"file://{path.absolute()}")

