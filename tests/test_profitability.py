from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from agency_metrics.repositories.sql_repository import SqlRecordRepository
from agency_metrics.services.profitability import ProfitabilityCalculator, margin_percent
from tests.factories import add_document, add_profile, add_project, add_service, add_task, add_time_entry


def test_service_without_revenue_has_zero_margin(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    service = add_service(db_session, name="Event staffing")
    crew = add_profile(db_session, internal_rate=Decimal("50"))
    task = add_task(db_session, project, service=service)
    add_time_entry(db_session, project, crew, task=task, minutes=600)

    [row] = ProfitabilityCalculator(repo).service_report()

    assert row.revenue == Decimal("0")
    assert row.cost == Decimal("500")
    assert row.profit == Decimal("-500")
    assert row.margin_percent == Decimal("0")
    assert row.hours_tracked == Decimal("10")
    assert row.activity_count == 1


def test_profit_identity_and_ordering(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    design = add_service(db_session, name="Design")
    video = add_service(db_session, name="Video")
    add_service(db_session, name="Archived", is_active=False)
    artist = add_profile(db_session, internal_rate=Decimal("40"))
    design_task = add_task(db_session, project, service=design)
    video_task = add_task(db_session, project, service=video)
    add_time_entry(db_session, project, artist, task=design_task, minutes=300)
    add_time_entry(db_session, project, artist, task=video_task, minutes=60)
    add_time_entry(db_session, project, artist, task=video_task, minutes=60)
    add_document(db_session, project, (Decimal("1000"), design), (Decimal("2000"), video))

    report = ProfitabilityCalculator(repo).service_report()

    assert [row.service_name for row in report] == ["Video", "Design"]
    for row in report:
        assert row.profit == row.revenue - row.cost
    video_row = report[0]
    assert video_row.cost == Decimal("80")
    assert video_row.activity_count == 2
    assert video_row.margin_percent == Decimal("96")


def test_equal_profit_keeps_service_order(db_session: Session, repo: SqlRecordRepository) -> None:
    add_service(db_session, name="Alpha")
    add_service(db_session, name="Beta")
    add_service(db_session, name="Gamma")

    report = ProfitabilityCalculator(repo).service_report()

    assert [row.service_name for row in report] == ["Alpha", "Beta", "Gamma"]


def test_margin_percent_guards_non_positive_revenue() -> None:
    assert margin_percent(Decimal("-10"), Decimal("0")) == Decimal("0")
    assert margin_percent(Decimal("25"), Decimal("100")) == Decimal("25")
