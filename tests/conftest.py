"""Pytest fixtures for registrar integration tests.

Storage and API tests run against an in-memory SQLite database that replaces
the configured PostgreSQL engine. Each test runs within a transaction that is
rolled back after the test, so tests never see each other's rows.

Usage:
    def test_get_grade(client: TestClient, grade_factory, teacher: Actor):
        grade = grade_factory(teacher_id=teacher.user_id)
        response = client.get(f"/api/grades/{grade.grade_id}", headers=actor_headers(teacher))
        assert response.status_code == 200
"""

from __future__ import annotations

import os
import typing as t
from pathlib import Path

import pydantic as p
import pytest
import sqlalchemy
import sqlalchemy.event
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

import registrar
import registrar.lib.json as json
from registrar.core import RegistrarContainer
from registrar.model import Actor, CourseID, DeploymentEnvironment, Grade, GradeStatus, UserID, UserRole
from registrar.storage import grade as grade_storage
from registrar.storage import table


@pytest.fixture(scope="session")
def container() -> t.Generator[RegistrarContainer]:
    """Boot the DI container for the test session.

    Uses the Test environment, so configuration is read from
    config/env.d/test/ on top of config/.
    """
    ct = RegistrarContainer()
    root = Path(os.path.dirname(registrar.__file__)).parent

    RegistrarContainer.boot(
        ct,
        debug=True,
        env=DeploymentEnvironment.Test,
        config_root=p.FileUrl(f"file://{root}/config"),
        override=(),
    )

    yield ct

    ct.shutdown_resources()


@pytest.fixture(scope="session")
def engine(container: RegistrarContainer) -> t.Generator[sqlalchemy.Engine]:
    """In-memory SQLite engine standing in for the configured database.

    StaticPool keeps the single connection (and so the database) alive across
    threads, including the TestClient's.
    """
    engine = sqlalchemy.create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        json_serializer=json.dumps,
        json_deserializer=json.loads,
    )

    # pysqlite manages transactions on its own and breaks SAVEPOINT; let
    # SQLAlchemy emit BEGIN instead
    @sqlalchemy.event.listens_for(engine, "connect")
    def _connect(dbapi_conn: t.Any, _: t.Any) -> None:
        dbapi_conn.isolation_level = None

    @sqlalchemy.event.listens_for(engine, "begin")
    def _begin(conn: sqlalchemy.Connection) -> None:
        conn.exec_driver_sql("BEGIN")

    table.metadata.create_all(engine)
    container.storage().persistent().engine.override(engine)

    yield engine

    container.storage().persistent().engine.reset_override()
    engine.dispose()


@pytest.fixture(scope="session")
def app(container: RegistrarContainer, engine: sqlalchemy.Engine) -> FastAPI:
    """Create the FastAPI application for testing."""
    from registrar.core.config.web import RegistrarWebSettings
    from registrar.web.registrar.main import _create_app  # pyright: ignore[reportPrivateUsage]

    return _create_app(
        config=RegistrarWebSettings(**container.config.web.registrar()),
        env=DeploymentEnvironment.Test,
    )


@pytest.fixture
def db_session(engine: sqlalchemy.Engine) -> t.Generator[Session]:
    """Provide a database session wrapped in a transaction.

    Each test gets a fresh session within a transaction that is rolled
    back after the test completes.

    Uses join_transaction_mode="create_savepoint" so that session.begin()
    creates savepoints instead of failing when already in a transaction.
    autobegin=False matches production.
    """
    connection = engine.connect()
    transaction = connection.begin()

    session = Session(
        bind=connection,
        autobegin=False,
        join_transaction_mode="create_savepoint",
    )

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture
def client(app: FastAPI, container: RegistrarContainer, db_session: Session) -> t.Generator[TestClient]:
    """Provide a TestClient whose requests share the test's transactional session."""
    container.storage().persistent().session.override(db_session)

    with TestClient(app) as test_client:
        yield test_client

    container.storage().persistent().session.reset_override()


# Actors


@pytest.fixture
def admin() -> Actor:
    return Actor(user_id=UserID(), role=UserRole.Admin)


@pytest.fixture
def teacher() -> Actor:
    return Actor(user_id=UserID(), role=UserRole.Teacher)


@pytest.fixture
def other_teacher() -> Actor:
    return Actor(user_id=UserID(), role=UserRole.Teacher)


@pytest.fixture
def student() -> Actor:
    return Actor(user_id=UserID(), role=UserRole.Student)


def actor_headers(actor: Actor) -> dict[str, str]:
    """Identity headers as the upstream gateway would set them."""
    return {"X-Actor-ID": str(actor.user_id), "X-Actor-Role": actor.role.value}


@pytest.fixture
def headers() -> t.Callable[[Actor], dict[str, str]]:
    return actor_headers


# Stored records


@pytest.fixture
def grade_factory(db_session: Session, teacher: Actor, student: Actor) -> t.Callable[..., Grade]:
    """Factory fixture for creating stored grades.

    Defaults to a PENDING grade authored by `teacher` for `student`.

    Usage:
        def test_something(grade_factory):
            grade = grade_factory(score=72.0, status=GradeStatus.Verified)
    """

    def create_grade(
        student_id: UserID | None = None,
        course_id: CourseID | None = None,
        teacher_id: UserID | None = None,
        score: float = 72.0,
        semester: str = "2025-fall",
        status: GradeStatus = GradeStatus.Pending,
        metadata: dict[str, t.Any] | None = None,
    ) -> Grade:
        with db_session.begin():
            return grade_storage.create(
                {
                    "student_id": student_id or student.user_id,
                    "course_id": course_id or CourseID(),
                    "teacher_id": teacher_id or teacher.user_id,
                    "score": score,
                    "semester": semester,
                    "status": status,
                    "metadata": metadata,
                },
                session=db_session,
            )

    return create_grade
