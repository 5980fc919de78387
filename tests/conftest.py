"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from church_admin.application.users import CreateUserUseCase
from church_admin.infrastructure.db.session import Base
from church_admin.infrastructure.db import models  # noqa: F401


@pytest.fixture
def db_engine():
    """
    In-memory SQLite engine shared by all connections of one test.

    StaticPool + check_same_thread=False let the TestClient threadpool
    reuse the same database as the test body.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def admin_user(db_session):
    return CreateUserUseCase(db_session).execute(
        email="admin@church.mg",
        password="admin-password",
        name="Pasteur Rakoto",
        role="admin",
    )


@pytest.fixture
def member_user(db_session):
    return CreateUserUseCase(db_session).execute(
        email="member@church.mg",
        password="member-password",
        role="user",
    )
