from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class StorageSettings(BaseSettings):
    persistent: PersistentSettings


class PostgresqlSettings(BaseSettings):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"


class PersistentSettings(BaseSettings):
    """Grades, their edit history and the system log all live in one PostgreSQL database"""

    postgresql: PostgresqlSettings
    echo: bool = False
    # edits hold a row lock for the length of one transaction; keep a few spare connections
    pool_size: t.Annotated[int, ant.Ge(1)] = 5
    pool_pre_ping: bool = True
