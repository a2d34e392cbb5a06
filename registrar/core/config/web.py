from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class WebSettings(BaseSettings):
    registrar: RegistrarWebSettings


class ServeSettings(BaseSettings):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class RegistrarWebSettings(BaseSettings):
    """Settings for the grade management web application."""

    backend: ServeSettings
    cors_origins: list[str] = []
