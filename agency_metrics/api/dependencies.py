"""Request-scoped dependencies shared by route modules."""

from __future__ import annotations

from datetime import date

from fastapi import Depends
from sqlalchemy.orm import Session

from agency_metrics.db.dependencies import get_db_session
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.repositories.sql_repository import SqlRecordRepository
from agency_metrics.services.workload import DateWindow


def get_record_repository(db: Session = Depends(get_db_session)) -> RecordRepository:
    return SqlRecordRepository(db)


def get_date_window(start: date | None = None, end: date | None = None) -> DateWindow:
    """Inclusive window from query parameters; defaults to the week starting today."""

    start = start or date.today()
    if end is None:
        return DateWindow.week_from(start)
    return DateWindow(start=start, end=end)
