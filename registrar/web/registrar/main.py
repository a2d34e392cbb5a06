"""ASGI application for the grade API."""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import registrar
from registrar.core import BootConfiguration, di, RegistrarContainer
from registrar.core.config.web import RegistrarWebSettings
from registrar.model import DeploymentEnvironment

from .route import router

# the frontend dev server
LocalOrigin = "http://localhost:5173"


def cors_origins(config: RegistrarWebSettings, env: DeploymentEnvironment) -> list[str]:
    origins = list(config.cors_origins)
    if env is DeploymentEnvironment.Local and LocalOrigin not in origins:
        origins.append(LocalOrigin)
    return origins


@di.inject
def _create_app(
    config: RegistrarWebSettings = di.Provide["config.web.registrar", di.as_(RegistrarWebSettings)],
    env: DeploymentEnvironment = di.Provide["env"],
) -> FastAPI:
    app = FastAPI(
        title="Registrar",
        description="Grade records with verification workflow and edit audit trail",
        version=registrar.__version__,
    )

    if origins := cors_origins(config, env):
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_methods=["GET", "POST", "PATCH", "DELETE"],
            allow_headers=["Content-Type", "X-Actor-ID", "X-Actor-Role"],
        )

    app.include_router(router)
    return app


def create_app() -> FastAPI:
    """Factory for uvicorn; workers boot their own container from the CLI's boot configuration."""
    boot_vars = os.getenv("__Registrar_BOOT")
    if not boot_vars:
        return _create_app()

    boot_cf = BootConfiguration.model_validate_json(boot_vars)
    ct = RegistrarContainer()
    RegistrarContainer.boot(
        ct, debug=boot_cf.debug, env=boot_cf.env, config_root=boot_cf.config_root, override=boot_cf.override
    )
    return _create_app(config=RegistrarWebSettings(**ct.config.web.registrar()), env=boot_cf.env)
