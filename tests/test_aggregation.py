from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from agency_metrics.models.entities import DocumentStatus
from agency_metrics.repositories.sql_repository import SqlRecordRepository
from agency_metrics.services.aggregation import CostAggregator, RevenueAggregator, billable_by_project
from agency_metrics.services.rates import RateResolver
from tests.factories import (
    add_cost,
    add_document,
    add_profile,
    add_project,
    add_service,
    add_task,
    add_time_entry,
)

REVENUE_STATUSES = ["approved", "paid", "sent"]


def test_costs_for_project_sums_only_that_project(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    other = add_project(db_session, title="Other")
    add_cost(db_session, project, Decimal("1200.50"))
    add_cost(db_session, project, Decimal("300"))
    add_cost(db_session, other, Decimal("999"))

    assert CostAggregator(repo).costs_for_project(project.id) == Decimal("1500.50")


def test_costs_for_project_without_rows_is_zero(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)

    assert CostAggregator(repo).costs_for_project(project.id) == Decimal("0")


def test_labor_cost_ignores_running_entries(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    designer = add_profile(db_session, internal_rate=Decimal("60"))
    add_time_entry(db_session, project, designer, minutes=90)
    add_time_entry(db_session, project, designer, running=True)

    assert CostAggregator(repo).labor_cost_for_project(project.id) == Decimal("90")


def test_labor_cost_for_service_follows_task_linkage(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    video = add_service(db_session, name="Video")
    print_ = add_service(db_session, name="Print")
    editor = add_profile(db_session, internal_rate=Decimal("40"))
    video_task = add_task(db_session, project, service=video)
    print_task = add_task(db_session, project, service=print_)
    add_time_entry(db_session, project, editor, task=video_task, minutes=120)
    add_time_entry(db_session, project, editor, task=print_task, minutes=60)
    add_time_entry(db_session, project, editor, minutes=600)

    aggregator = CostAggregator(repo)

    assert aggregator.labor_cost_for_service(video.id) == Decimal("80")
    assert aggregator.labor_cost_for_service(print_.id) == Decimal("40")


def test_billable_by_project_counts_completed_billable_time(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    consultant = add_profile(db_session, billable_rate=Decimal("120"))
    add_time_entry(db_session, project, consultant, minutes=30)
    add_time_entry(db_session, project, consultant, minutes=60, billable=False)
    add_time_entry(db_session, project, consultant, running=True)

    entries = repo.list_time_entries(project_ids={project.id})
    rollup = billable_by_project(entries, RateResolver().index(repo.list_profiles()))[project.id]

    assert rollup.billable_value == Decimal("60")
    assert rollup.billable_hours == Decimal("0.5")
    assert rollup.total_hours == Decimal("1.5")


def test_revenue_counts_only_qualifying_statuses(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    add_document(db_session, project, (Decimal("1000"), None), status=DocumentStatus.APPROVED)
    add_document(db_session, project, (Decimal("250"), None), status=DocumentStatus.PAID)
    add_document(db_session, project, (Decimal("400"), None), status=DocumentStatus.SENT)
    add_document(db_session, project, (Decimal("5000"), None), status=DocumentStatus.DRAFT)
    add_document(db_session, project, (Decimal("700"), None), status=DocumentStatus.CANCELLED)

    assert RevenueAggregator(repo, REVENUE_STATUSES).revenue_for_project(project.id) == Decimal("1650")


def test_revenue_for_service_excludes_unlinked_items(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    branding = add_service(db_session, name="Branding")
    add_document(db_session, project, (Decimal("800"), branding), (Decimal("200"), None))
    add_document(db_session, None, (Decimal("150"), branding))

    aggregator = RevenueAggregator(repo, REVENUE_STATUSES)

    assert aggregator.revenue_for_service(branding.id) == Decimal("950")
    assert aggregator.revenue_for_project(project.id) == Decimal("1000")
