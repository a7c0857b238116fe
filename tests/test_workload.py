from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

from agency_metrics.core.exceptions import InvalidInputError, RecordNotFoundError
from agency_metrics.models.entities import ProjectStatus, TaskStatus
from agency_metrics.repositories.sql_repository import SqlRecordRepository
from agency_metrics.services.workload import AssignmentFeasibilityChecker, DateWindow, WorkloadCalculator
from tests.factories import add_member, add_profile, add_project, add_task

TWO_WEEKS = DateWindow(start=date(2026, 3, 2), end=date(2026, 3, 15))
IN_WINDOW = date(2026, 3, 10)


def test_window_rejects_reversed_dates() -> None:
    with pytest.raises(InvalidInputError):
        DateWindow(start=date(2026, 3, 10), end=date(2026, 3, 9))


def test_window_is_inclusive() -> None:
    assert TWO_WEEKS.days == 14
    assert DateWindow.week_from(date(2026, 3, 2)).end == date(2026, 3, 8)
    assert DateWindow(start=date(2026, 3, 2), end=date(2026, 3, 2)).days == 1


def test_overlap_rules() -> None:
    assert TWO_WEEKS.overlaps(None, date(2026, 3, 2))
    assert TWO_WEEKS.overlaps(date(2026, 3, 15), date(2026, 4, 1))
    assert not TWO_WEEKS.overlaps(date(2026, 3, 16), date(2026, 4, 1))
    assert not TWO_WEEKS.overlaps(None, date(2026, 3, 1))
    assert not TWO_WEEKS.overlaps(date(2026, 3, 3), None)


def test_utilization_over_two_weeks(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    planner = add_profile(db_session)
    add_task(db_session, project, assignee=planner, estimated_hours=Decimal("60"), due_date=IN_WINDOW)
    add_task(db_session, project, assignee=planner, estimated_hours=Decimal("40"), due_date=IN_WINDOW)

    workload = WorkloadCalculator(repo).profile_workload(planner.id, TWO_WEEKS)

    assert workload.capacity_hours == Decimal("80")
    assert workload.total_planned_hours == Decimal("100")
    assert workload.utilization_percentage == Decimal("125")
    assert workload.assigned_tasks == 2
    assert workload.assigned_projects == 1


def test_seventy_hours_over_two_weeks(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    planner = add_profile(db_session)
    add_task(db_session, project, assignee=planner, estimated_hours=Decimal("70"), due_date=IN_WINDOW)

    workload = WorkloadCalculator(repo).profile_workload(planner.id, TWO_WEEKS)

    assert workload.utilization_percentage == Decimal("87.5")


def test_utilization_is_linear_in_planned_hours(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    light = add_profile(db_session, full_name="Light", weekly_hours=Decimal("30"))
    heavy = add_profile(db_session, full_name="Heavy", weekly_hours=Decimal("30"))
    add_task(db_session, project, assignee=light, estimated_hours=Decimal("12"), due_date=IN_WINDOW)
    add_task(db_session, project, assignee=heavy, estimated_hours=Decimal("36"), due_date=IN_WINDOW)

    workloads = WorkloadCalculator(repo).workloads([light.id, heavy.id], TWO_WEEKS)

    assert workloads[heavy.id].utilization_percentage == workloads[light.id].utilization_percentage * 3


def test_zero_weekly_hours_uses_default_capacity(db_session: Session, repo: SqlRecordRepository) -> None:
    freelancer = add_profile(db_session, weekly_hours=Decimal("0"))

    workload = WorkloadCalculator(repo).profile_workload(freelancer.id, TWO_WEEKS)

    assert workload.weekly_hours == Decimal("40")
    assert workload.utilization_percentage == Decimal("0")


def test_only_open_tasks_of_active_projects_in_window_count(db_session: Session, repo: SqlRecordRepository) -> None:
    active = add_project(db_session)
    closed = add_project(db_session, title="Closed", status=ProjectStatus.COMPLETED)
    staffed = add_project(db_session, title="Staffed")
    person = add_profile(db_session)
    add_member(db_session, staffed, person)
    add_task(db_session, active, assignee=person, estimated_hours=Decimal("8"), due_date=IN_WINDOW)
    add_task(db_session, active, assignee=person, estimated_hours=Decimal("5"))
    add_task(
        db_session, active, assignee=person, status=TaskStatus.DONE, estimated_hours=Decimal("9"), due_date=IN_WINDOW
    )
    add_task(db_session, active, assignee=person, estimated_hours=Decimal("7"), due_date=date(2026, 2, 27))
    add_task(db_session, closed, assignee=person, estimated_hours=Decimal("4"), due_date=IN_WINDOW)
    add_task(db_session, active, assignee=person, due_date=IN_WINDOW)

    workload = WorkloadCalculator(repo).profile_workload(person.id, TWO_WEEKS)

    assert workload.total_planned_hours == Decimal("8")
    assert workload.assigned_tasks == 2
    assert workload.assigned_projects == 2


def test_unknown_profile_raises_not_found(repo: SqlRecordRepository) -> None:
    with pytest.raises(RecordNotFoundError):
        WorkloadCalculator(repo).profile_workload(uuid.uuid4(), TWO_WEEKS)


def test_feasibility_rejects_over_threshold(db_session: Session, repo: SqlRecordRepository) -> None:
    current = add_project(db_session)
    candidate = add_project(db_session, title="Candidate")
    person = add_profile(db_session)
    add_task(db_session, current, assignee=person, estimated_hours=Decimal("100"), due_date=IN_WINDOW)

    result = AssignmentFeasibilityChecker(repo).check(person.id, candidate.id, TWO_WEEKS, Decimal("120"))

    assert result.current_utilization == Decimal("125")
    assert result.projected_utilization == Decimal("125")
    assert result.can_assign is False
    assert result.reason == "Would exceed capacity (125% utilization)"


def test_feasibility_adds_outstanding_project_hours(db_session: Session, repo: SqlRecordRepository) -> None:
    current = add_project(db_session)
    candidate = add_project(db_session, title="Candidate")
    person = add_profile(db_session)
    other = add_profile(db_session, full_name="Other")
    add_task(db_session, current, assignee=person, estimated_hours=Decimal("40"), due_date=IN_WINDOW)
    add_task(db_session, candidate, assignee=other, estimated_hours=Decimal("24"), due_date=IN_WINDOW)
    add_task(db_session, candidate, estimated_hours=Decimal("8"), due_date=IN_WINDOW)

    result = AssignmentFeasibilityChecker(repo).check(person.id, candidate.id, TWO_WEEKS)

    assert result.additional_hours == Decimal("32")
    assert result.current_utilization == Decimal("50")
    assert result.projected_utilization == Decimal("90")
    assert result.threshold_percent == Decimal("100")
    assert result.can_assign is True
    assert result.reason is None


def test_feasibility_for_existing_member_adds_nothing(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    person = add_profile(db_session)
    add_member(db_session, project, person)
    add_task(db_session, project, estimated_hours=Decimal("500"), due_date=IN_WINDOW)

    result = AssignmentFeasibilityChecker(repo).check(person.id, project.id, TWO_WEEKS)

    assert result.additional_hours == Decimal("0")
    assert result.can_assign is True


def test_feasibility_warns_when_effort_is_unknown(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    person = add_profile(db_session)
    add_task(db_session, project, due_date=IN_WINDOW)

    result = AssignmentFeasibilityChecker(repo).check(person.id, project.id, TWO_WEEKS)

    assert result.can_assign is True
    assert result.additional_hours == Decimal("0")
    assert result.reason is not None
    assert "could not be determined" in result.reason


def test_feasibility_rejects_negative_threshold(db_session: Session, repo: SqlRecordRepository) -> None:
    project = add_project(db_session)
    person = add_profile(db_session)

    with pytest.raises(InvalidInputError):
        AssignmentFeasibilityChecker(repo).check(person.id, project.id, TWO_WEEKS, Decimal("-1"))


def test_rejection_keeps_unknown_effort_warning(db_session: Session, repo: SqlRecordRepository) -> None:
    current = add_project(db_session)
    candidate = add_project(db_session, title="Candidate")
    person = add_profile(db_session)
    add_task(db_session, current, assignee=person, estimated_hours=Decimal("100"), due_date=IN_WINDOW)
    add_task(db_session, candidate, due_date=IN_WINDOW)

    result = AssignmentFeasibilityChecker(repo).check(person.id, candidate.id, TWO_WEEKS, Decimal("120"))

    assert result.can_assign is False
    assert result.additional_hours == Decimal("0")
    assert "could not be determined" in result.reason
    assert result.reason.endswith("Would exceed capacity (125% utilization)")


def test_planned_and_on_hold_projects_still_count(db_session: Session, repo: SqlRecordRepository) -> None:
    planned = add_project(db_session, title="Planned", status=ProjectStatus.PLANNED)
    paused = add_project(db_session, title="Paused", status=ProjectStatus.ON_HOLD)
    cancelled = add_project(db_session, title="Cancelled", status=ProjectStatus.CANCELLED)
    person = add_profile(db_session)
    add_task(db_session, planned, assignee=person, estimated_hours=Decimal("6"), due_date=IN_WINDOW)
    add_task(db_session, paused, assignee=person, estimated_hours=Decimal("4"), due_date=IN_WINDOW)
    add_task(db_session, cancelled, assignee=person, estimated_hours=Decimal("30"), due_date=IN_WINDOW)

    workload = WorkloadCalculator(repo).profile_workload(person.id, TWO_WEEKS)

    assert workload.total_planned_hours == Decimal("10")
    assert workload.assigned_projects == 2
