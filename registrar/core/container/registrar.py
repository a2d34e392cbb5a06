from __future__ import annotations

import os
import types
from pathlib import Path

import pydantic as p
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Object, Provider, Resource, Singleton

import registrar
from registrar.model import BaseModel, DeploymentEnvironment

from ..config import Secrets, Settings
from ..provider import LoggingProvider
from .storage import StorageContainer


class BootConfiguration(BaseModel):
    """What `boot` was called with; serialized into the environment so uvicorn workers can boot the same way"""

    debug: bool
    env: DeploymentEnvironment
    config_root: p.FileUrl
    override: tuple[str, ...]


class RegistrarContainer(DeclarativeContainer):
    config: Configuration = Configuration()
    secrets: Configuration = Configuration()

    debug: Provider[bool] = Singleton(bool)
    env: Provider[DeploymentEnvironment] = Singleton(DeploymentEnvironment)
    root: Object[Path | None] = Object(None)

    logging: Provider[LoggingProvider] = Resource(LoggingProvider, config=config.logging, debug=debug)
    storage: Provider[StorageContainer] = Container(
        StorageContainer, config=config.storage, secrets=secrets, logging=logging, root=root
    )

    _boot_config: Provider[BootConfiguration | None] = Object(None)

    @staticmethod
    def boot(
        ct: RegistrarContainer,
        /,
        debug: bool,
        env: DeploymentEnvironment,
        config_root: p.AnyUrl,
        override: tuple[str, ...] | None = None,
        wiring: tuple[str | types.ModuleType, ...] | None = None,
    ):
        """Load settings and secrets for `env`, then wire the web and CLI packages"""
        if config_root.scheme != "file":
            raise ValueError(f"unsupported scheme for config root: {config_root.scheme}")
        config_root = p.FileUrl(str(config_root))
        override = override or ()
        ps = Settings(env=env, root=config_root, override=override)
        # aliased keys ("class", "()") are what dictConfig reads
        ct.config.from_pydantic(ps, by_alias=True)
        ct.secrets.from_pydantic(Secrets(env=env))
        ct.debug.override(debug)
        ct.env.override(env)
        ct.root.override(Path(os.path.dirname(registrar.__file__)).parent)

        ct.wire(packages=["registrar.web", "registrar.cli"])
        if wiring:
            ct.wire(modules=wiring)

        logger = ct.logging().get_logger()
        for ov in override:
            k, v = ov.split("=", 1)
            logger.info("overriding configuration parameter", extra={"key": k, "value": v})
        logger.debug("configuration finished", extra={"config": str(config_root), "env": env.value})

        ct._boot_config.override(BootConfiguration(debug=debug, env=env, config_root=config_root, override=override))
