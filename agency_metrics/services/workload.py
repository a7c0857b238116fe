"""Staff utilization over a date window and assignment feasibility."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from uuid import UUID

from agency_metrics.core.config import Settings, get_settings
from agency_metrics.core.exceptions import InvalidInputError, RecordNotFoundError
from agency_metrics.models.entities import TaskStatus
from agency_metrics.repositories.records import ProfileRecord, RecordRepository, TaskRecord
from agency_metrics.services.profitability import HUNDRED
from agency_metrics.services.rates import ZERO, RateResolver, or_default

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = Decimal("7")


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive ``[start, end]`` range of calendar days."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end < self.start:
            raise InvalidInputError("window", f"end {self.end.isoformat()} is before start {self.start.isoformat()}")

    @classmethod
    def week_from(cls, start: date) -> DateWindow:
        return cls(start=start, end=start + timedelta(days=6))

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def overlaps(self, start_date: date | None, due_date: date | None) -> bool:
        # Open start is allowed; a missing due date never overlaps.
        if due_date is None:
            return False
        return (start_date is None or start_date <= self.end) and due_date >= self.start


@dataclass(frozen=True, slots=True)
class Workload:
    profile_id: UUID
    window_start: date
    window_end: date
    window_days: int
    weekly_hours: Decimal
    capacity_hours: Decimal
    total_planned_hours: Decimal
    utilization_percentage: Decimal
    assigned_tasks: int
    assigned_projects: int


@dataclass(frozen=True, slots=True)
class ProjectWorkload:
    project_id: UUID
    outstanding_hours: Decimal
    outstanding_tasks: int
    unestimated_tasks: int

    @property
    def is_determinable(self) -> bool:
        return self.unestimated_tasks == 0


@dataclass(frozen=True, slots=True)
class AssignmentFeasibility:
    profile_id: UUID
    project_id: UUID
    threshold_percent: Decimal
    can_assign: bool
    reason: str | None
    current_utilization: Decimal
    projected_utilization: Decimal
    additional_hours: Decimal


def utilization(planned_hours: Decimal, capacity_hours: Decimal) -> Decimal:
    if capacity_hours <= ZERO:
        return ZERO
    return planned_hours / capacity_hours * HUNDRED


class WorkloadCalculator:
    """Planned hours of open tasks against weekly capacity scaled to a window."""

    def __init__(
        self,
        repo: RecordRepository,
        settings: Settings | None = None,
        rate_resolver: RateResolver | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings or get_settings()
        self.rate_resolver = rate_resolver or RateResolver(self.settings.default_weekly_hours)

    def profile_workload(self, profile_id: UUID, window: DateWindow) -> Workload:
        profile = self.repo.get_profile(profile_id)
        if profile is None:
            raise RecordNotFoundError("Profile", profile_id)
        return self._compute([profile], window)[profile.id]

    def workloads(self, profile_ids: Collection[UUID] | None, window: DateWindow) -> dict[UUID, Workload]:
        """Workload per profile; ``None`` means every profile. Unknown ids are omitted."""

        return self._compute(self.repo.list_profiles(profile_ids), window)

    def counts_toward_load(self, task: TaskRecord, active_projects: Collection[UUID], window: DateWindow) -> bool:
        return (
            task.status != TaskStatus.DONE.value
            and task.project_id in active_projects
            and window.overlaps(task.start_date, task.due_date)
        )

    def _compute(self, profiles: list[ProfileRecord], window: DateWindow) -> dict[UUID, Workload]:
        if not profiles:
            return {}
        profile_ids = {profile.id for profile in profiles}
        tasks = self.repo.list_tasks(assignee_ids=profile_ids)
        memberships = self.repo.list_project_members(profile_ids=profile_ids)
        project_ids = {task.project_id for task in tasks} | {member.project_id for member in memberships}
        active_projects = self._active_project_ids(project_ids)

        result: dict[UUID, Workload] = {}
        for profile in profiles:
            counted = [
                task
                for task in tasks
                if task.assigned_to == profile.id and self.counts_toward_load(task, active_projects, window)
            ]
            projects = {task.project_id for task in counted}
            projects.update(
                member.project_id
                for member in memberships
                if member.profile_id == profile.id and member.project_id in active_projects
            )
            planned = sum((or_default(task.estimated_hours, ZERO) for task in counted), ZERO)
            weekly_hours = self.rate_resolver.weekly_hours(profile)
            capacity = weekly_hours * window.days / DAYS_PER_WEEK

            result[profile.id] = Workload(
                profile_id=profile.id,
                window_start=window.start,
                window_end=window.end,
                window_days=window.days,
                weekly_hours=weekly_hours,
                capacity_hours=capacity,
                total_planned_hours=planned,
                utilization_percentage=utilization(planned, capacity),
                assigned_tasks=len(counted),
                assigned_projects=len(projects),
            )
        logger.debug("Workload computed for %d profiles over %d days", len(result), window.days)
        return result

    def project_workload(
        self,
        project_id: UUID,
        window: DateWindow,
        exclude_profile_id: UUID | None = None,
    ) -> ProjectWorkload:
        """Outstanding estimated hours of the project's open tasks in the window.

        Tasks assigned to ``exclude_profile_id`` are skipped, since they already
        count toward that profile's own load. Inactive projects carry no load.
        """

        project = self.repo.get_project(project_id)
        if project is None:
            raise RecordNotFoundError("Project", project_id)
        if project.status not in self.settings.active_project_statuses:
            return ProjectWorkload(
                project_id=project.id, outstanding_hours=ZERO, outstanding_tasks=0, unestimated_tasks=0
            )

        outstanding = [
            task
            for task in self.repo.list_tasks(project_ids={project.id})
            if (exclude_profile_id is None or task.assigned_to != exclude_profile_id)
            and self.counts_toward_load(task, {project.id}, window)
        ]
        return ProjectWorkload(
            project_id=project.id,
            outstanding_hours=sum((or_default(task.estimated_hours, ZERO) for task in outstanding), ZERO),
            outstanding_tasks=len(outstanding),
            unestimated_tasks=sum(1 for task in outstanding if task.estimated_hours is None),
        )

    def _active_project_ids(self, project_ids: Collection[UUID]) -> set[UUID]:
        statuses = set(self.settings.active_project_statuses)
        return {project.id for project in self.repo.list_projects(project_ids) if project.status in statuses}


class AssignmentFeasibilityChecker:
    """Advisory check whether a profile can take on a project."""

    def __init__(
        self,
        repo: RecordRepository,
        settings: Settings | None = None,
        workload_calculator: WorkloadCalculator | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings or get_settings()
        self.workload_calculator = workload_calculator or WorkloadCalculator(repo, self.settings)

    def check(
        self,
        profile_id: UUID,
        project_id: UUID,
        window: DateWindow,
        threshold_percent: Decimal | None = None,
    ) -> AssignmentFeasibility:
        threshold = or_default(threshold_percent, self.settings.feasibility_threshold_percent)
        if threshold < ZERO:
            raise InvalidInputError("threshold_percent", "must not be negative")

        workload = self.workload_calculator.profile_workload(profile_id, window)
        project_load = self.workload_calculator.project_workload(project_id, window, exclude_profile_id=profile_id)
        is_member = bool(self.repo.list_project_members(project_ids={project_id}, profile_ids={profile_id}))

        reason: str | None = None
        additional = ZERO
        if is_member:
            logger.debug("Profile %s already staffed on project %s", profile_id, project_id)
        elif project_load.is_determinable:
            additional = project_load.outstanding_hours
        else:
            reason = (
                f"Project effort could not be determined ({project_load.unestimated_tasks} tasks without estimate); "
                "decision based on current utilization"
            )

        projected = utilization(workload.total_planned_hours + additional, workload.capacity_hours)
        can_assign = projected <= threshold
        if not can_assign:
            overrun = f"Would exceed capacity ({projected:.0f}% utilization)"
            reason = f"{reason}. {overrun}" if reason else overrun

        logger.debug(
            "Feasibility for profile %s on project %s: projected %s%% against %s%%",
            profile_id,
            project_id,
            projected,
            threshold,
        )
        return AssignmentFeasibility(
            profile_id=profile_id,
            project_id=project_id,
            threshold_percent=threshold,
            can_assign=can_assign,
            reason=reason,
            current_utilization=workload.utilization_percentage,
            projected_utilization=projected,
            additional_hours=additional,
        )
