"""Thin typing-friendly layer over dependency_injector's wiring markers"""

from __future__ import annotations

__all__ = [
    "Closing",
    "Manage",
    "Provide",
    "as_",
    "inject",
]

import typing as t

import dependency_injector.wiring as wiring
from dependency_injector.containers import Container
from dependency_injector.providers import Provider
from dependency_injector.wiring import ClassGetItemMeta, Closing, Provide, TypeModifier

P = t.ParamSpec("P")
R = t.TypeVar("R")
T = t.TypeVar("T")


def inject(fn: t.Callable[P, R]) -> t.Callable[P, R]:
    return wiring.inject(fn)


def as_(type_: type[T]) -> TypeModifier:
    # wiring.as_ is untyped
    return TypeModifier(type_)


class Manage(object, metaclass=ClassGetItemMeta):
    """`Provide[...]` for a resource that is closed when the injected call returns, e.g. a database session"""

    def __new__(cls, provider: Provider[t.Any] | Container | str):
        return Closing[Provide[provider]]

    @classmethod
    def __class_getitem__(cls, item: Provider[t.Any] | Container | str):
        return cls(item)
