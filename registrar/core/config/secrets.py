from __future__ import annotations

import typing as t

import pydantic as p
from pydantic_settings import BaseSettings as PydanticBaseSettings
from pydantic_settings import PydanticBaseSettingsSource, SettingsConfigDict

from registrar.model import DeploymentEnvironment

from .base import BaseSettings


class PostgresqlSecrets(p.BaseModel):
    username: p.Secret[str] | None = None
    password: p.Secret[str] | None = None

    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # None when no credentials are configured
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)


class Secrets(BaseSettings):
    """Credentials, read from REGISTRAR_-prefixed environment variables

    e.g. REGISTRAR_POSTGRESQL__USERNAME, REGISTRAR_POSTGRESQL__PASSWORD
    """

    model_config = SettingsConfigDict(env_prefix="REGISTRAR_", env_nested_delimiter="__", extra="ignore")

    env: DeploymentEnvironment
    postgresql: PostgresqlSecrets = PostgresqlSecrets()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[PydanticBaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings
