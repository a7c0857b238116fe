from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from agency_metrics.db.base import Base
from agency_metrics.db.dependencies import get_db_session
import agency_metrics.models.entities  # noqa: F401
from agency_metrics.main import create_app
from agency_metrics.models.entities import (
    Cost,
    FinancialDocument,
    FinancialItem,
    Profile,
    Project,
    ProjectMember,
    SeniorityLevel,
    ServiceModule,
    Task,
    TimeEntry,
)
from agency_metrics.repositories.sql_repository import SqlRecordRepository

TEST_TABLES = [
    Profile.__table__,
    ServiceModule.__table__,
    SeniorityLevel.__table__,
    Project.__table__,
    ProjectMember.__table__,
    Task.__table__,
    TimeEntry.__table__,
    Cost.__table__,
    FinancialDocument.__table__,
    FinancialItem.__table__,
]


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine, tables=TEST_TABLES)
    yield engine
    Base.metadata.drop_all(bind=engine, tables=TEST_TABLES, checkfirst=True)


@pytest.fixture()
def db_session(engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def repo(db_session: Session) -> SqlRecordRepository:
    return SqlRecordRepository(db_session)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
