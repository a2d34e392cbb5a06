"""Database schema migrations, driven by alembic against the configured database"""

from __future__ import annotations

import alembic.command
import alembic.config

import registrar.lib.cli as click
from registrar.core import di


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(
    verbose: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """Show the revision the database is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.argument("message")
@click.option("--autogenerate/--empty", default=True, help="diff the tables against the database")
@di.inject
def generate(
    message: str,
    autogenerate: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """Write a new revision under migrations/versions."""
    alembic.command.revision(alembic_conf, message, autogenerate=autogenerate)


@schema.command()
@click.argument("revision", default="head")
@click.option("--sql", is_flag=True, default=False, help="print the DDL instead of running it")
@di.inject
def up(
    revision: str,
    sql: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """Upgrade to REVISION, the latest by default."""
    alembic.command.upgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.argument("revision")
@click.option("--sql", is_flag=True, default=False, help="print the DDL instead of running it")
@di.inject
def down(
    revision: str,
    sql: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """Downgrade to REVISION."""
    alembic.command.downgrade(alembic_conf, revision, sql=sql)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(
    verbose: bool,
    alembic_conf: alembic.config.Config = di.Provide["storage.persistent.alembic_config"],
):
    """List revisions, marking the current one."""
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)
