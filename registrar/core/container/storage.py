from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import registrar.lib.json as json

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PersistentSettings, PostgresqlSettings
from ..provider import LoggingProvider


def build_dsn(config: PostgresqlSettings, secrets: PostgresqlSecrets) -> DSN:
    return DSN.create(
        config.driver,
        host=str(config.host) if config.host else None,
        port=config.port,
        database=config.database,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
    )


def provide_alembic_conf(
    migration_path: Path, config: PostgresqlSettings, secrets: PostgresqlSecrets, root: Path | None
) -> alembic.config.Config:
    if root is None:
        raise RuntimeError("container has not been booted")

    # configparser interpolation would eat a literal % in the password
    url = build_dsn(config, secrets).render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_main_option("sqlalchemy.url", url)
    ac.set_main_option("file_template", "%%(rev)s_%%(slug)s")
    return ac


def provide_engine(
    config: PersistentSettings, secrets: PostgresqlSecrets, logging: LoggingProvider
) -> sqlalchemy.Engine:
    logger = logging.get_logger()
    dsn = build_dsn(config.postgresql, secrets)

    engine = sqlalchemy.create_engine(
        dsn,
        echo=config.echo,
        pool_size=config.pool_size,
        pool_pre_ping=config.pool_pre_ping,
        json_serializer=json.dumps,
        json_deserializer=json.loads,
    )
    sqlalchemy.event.listen(engine, "connect", pin_utc)
    logger.info("initialized SQLAlchemy engine", extra={"database": config.postgresql.database})
    logger.trace("engine url", extra={"url": dsn.render_as_string(hide_password=True)})
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """A fresh session per injection; callers own it (see `di.Manage`) and open transactions explicitly"""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


def pin_utc(dbapi_conn: t.Any, _: t.Any) -> None:
    # timestamptz values come back in UTC
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | None] = Object()

    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=config.postgresql.as_(PostgresqlSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=config.as_(PersistentSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        logging=logging,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config = Configuration(strict=True)
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | None] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, logging=logging, root=root
    )
