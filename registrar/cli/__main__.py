"""`registrar` command line entry point.

Subcommand modules are imported on demand; each is wired into the
container when the group callback boots it.
"""

from __future__ import annotations

import importlib
import sys
import threading
import traceback
import types
import typing as t
from pathlib import Path

import pydantic as p

import registrar
import registrar.lib.cli as click
from registrar.core import di, RegistrarContainer
from registrar.model import DeploymentEnvironment

DefaultConfigRoot: t.Final[Path] = Path(registrar.__file__).resolve().parents[1] / "config"

Subcommands: t.Final[tuple[str, ...]] = ("grade", "schema", "web")


class RegistrarMultiCommand(click.Group):
    wiring: list[types.ModuleType] = []

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(Subcommands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        if cmd_name not in Subcommands:
            return None
        mod = importlib.import_module(f"registrar.cli.{cmd_name}")
        self.wiring.append(mod)
        return getattr(mod, cmd_name)


@click.group(cls=RegistrarMultiCommand)
@click.option("-E", "--env", default=DeploymentEnvironment.Local, type=click.EnumType(DeploymentEnvironment))
@click.option("-c", "--config-root", default=DefaultConfigRoot, type=click.URIParamType(dir_ok=True))
@click.option(
    "-o",
    "--override",
    multiple=True,
    help="override a configuration value, e.g. -o grading.default_reason='grade review'",
)
@click.option("-D", "--debug", is_flag=True, default=False, help="print tracebacks and capture warnings")
@click.pass_obj
@di.inject
def main(
    ct: RegistrarContainer,
    env: DeploymentEnvironment,
    config_root: p.FileUrl,
    override: tuple[str, ...],
    debug: bool,
):
    RegistrarContainer.boot(
        ct,
        debug=debug,
        env=env,
        config_root=config_root,
        override=override,
        wiring=tuple(RegistrarMultiCommand.wiring),
    )


def execute_command(*_args: str) -> None:
    threading.current_thread().name = "registrar-0"
    args = list(_args or sys.argv)
    prog = Path(args[0]).name
    container = RegistrarContainer()

    try:
        with main.make_context(prog, args=args[1:]) as ctx:
            ctx.obj = container
            sys.exit(t.cast(int, main.invoke(ctx)))
    except (EOFError, KeyboardInterrupt, click.Abort):
        click.echo("Aborted!", file=sys.stderr)
        sys.exit(1)
    except click.exceptions.Exit as e:
        sys.exit(e.exit_code)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        click.echo(click.style("ERROR ", fg="red") + str(e), file=sys.stderr)
        if "-D" in args or "--debug" in args:
            traceback.print_exc()
        sys.exit(-1)
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    execute_command(*sys.argv)
