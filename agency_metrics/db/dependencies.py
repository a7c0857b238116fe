"""Database dependencies for FastAPI endpoints."""

from collections.abc import Generator

from sqlalchemy.orm import Session

from agency_metrics.db.session import SessionLocal


def get_db_session() -> Generator[Session, None, None]:
    """Yield a read session for the current request."""

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

