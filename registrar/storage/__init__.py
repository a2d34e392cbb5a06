"""Functional storage modules.

Each function takes the session to use (injected from the container by
default) and works inside whatever transaction the caller has opened.
"""

__all__ = [
    "Session",
    "grade",
    "history",
    "log",
]

from sqlalchemy.orm import Session

from . import grade, history, log  # noqa: E402
