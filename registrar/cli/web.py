import os

import uvicorn

import registrar.lib.cli as click
from registrar.core import BootConfiguration, di
from registrar.core.config import LoggingSettings, RegistrarWebSettings

AppFactory = "registrar.web.registrar.main:create_app"


@click.group()
def web(): ...


@web.command(name="serve")
@click.option("-h", "--host", default=None, help="bind address, default from web.registrar.backend")
@click.option("-p", "--port", type=click.IntRange(min=1, max=65535), default=None)
@click.option("-w", "--workers", type=click.IntRange(min=1), default=1)
@click.option("--reload", is_flag=True, default=False, help="restart on source changes")
@di.inject
def serve(
    host: str | None,
    port: int | None,
    workers: int,
    reload: bool,
    boot_cf: BootConfiguration = di.Provide["_boot_config"],
    logging_cf: LoggingSettings = di.Provide["config.logging", di.as_(LoggingSettings)],  # noqa: B008
    web_cf: RegistrarWebSettings = di.Provide["config.web.registrar", di.as_(RegistrarWebSettings)],  # noqa: B008
):
    """Serve the grade API with uvicorn."""
    # workers are separate processes; they re-boot the container from this
    os.environ["__Registrar_BOOT"] = boot_cf.model_dump_json()
    uvicorn.run(
        AppFactory,
        factory=True,
        host=host or str(web_cf.backend.host),
        port=port or web_cf.backend.port,
        reload=reload,
        workers=workers,
        log_config=logging_cf.model_dump(by_alias=True),
    )
