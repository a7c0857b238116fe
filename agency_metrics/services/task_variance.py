"""Plan-vs-actual comparison for tasks and service groups."""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID

from agency_metrics.core.config import Settings, get_settings
from agency_metrics.core.exceptions import RecordNotFoundError
from agency_metrics.repositories.records import RecordRepository, TaskRecord, TimeEntryRecord
from agency_metrics.services.aggregation import entry_hours
from agency_metrics.services.profitability import HUNDRED
from agency_metrics.services.rates import ZERO, RateResolver, ResolvedRates, or_default

logger = logging.getLogger(__name__)


class VarianceStatus(str, enum.Enum):
    UNDER_BUDGET = "under_budget"
    ON_BUDGET = "on_budget"
    OVER_BUDGET = "over_budget"


class BreakdownStatus(str, enum.Enum):
    UNDER = "under"
    ON_TRACK = "on_track"
    OVER = "over"


def percent_of(delta: Decimal, base: Decimal) -> Decimal:
    if base <= ZERO:
        return ZERO
    return delta / base * HUNDRED


def variance_direction(percent: Decimal, tolerance: Decimal) -> int:
    """-1 below the tolerance band, 1 above it, 0 inside (bounds included)."""

    if percent < -tolerance:
        return -1
    if percent > tolerance:
        return 1
    return 0


_TASK_STATUS = {-1: VarianceStatus.UNDER_BUDGET, 0: VarianceStatus.ON_BUDGET, 1: VarianceStatus.OVER_BUDGET}
_GROUP_STATUS = {-1: BreakdownStatus.UNDER, 0: BreakdownStatus.ON_TRACK, 1: BreakdownStatus.OVER}


@dataclass(frozen=True, slots=True)
class TaskVariance:
    task_id: UUID
    task_title: str
    estimated_hours: Decimal
    estimated_rate: Decimal
    planned_value: Decimal
    actual_hours: Decimal
    actual_rates: tuple[Decimal, ...]
    actual_value: Decimal
    hours_variance: Decimal
    hours_variance_percent: Decimal
    value_variance: Decimal
    value_variance_percent: Decimal
    status: VarianceStatus


@dataclass(frozen=True, slots=True)
class ServiceBreakdownRow:
    service_module_id: UUID
    service_module_name: str
    seniority_level_id: UUID | None
    seniority_level_name: str | None
    total_estimated_hours: Decimal
    total_planned_value: Decimal
    total_actual_hours: Decimal
    total_actual_value: Decimal
    hours_variance: Decimal
    value_variance: Decimal
    variance_status: BreakdownStatus
    task_count: int


@dataclass(slots=True)
class _TaskActuals:
    hours: Decimal = ZERO
    value: Decimal = ZERO
    rates: list[Decimal] = field(default_factory=list)


@dataclass(slots=True)
class _ServiceGroup:
    service_module_id: UUID
    seniority_level_id: UUID | None
    estimated_hours: Decimal = ZERO
    planned_value: Decimal = ZERO
    actual_hours: Decimal = ZERO
    actual_value: Decimal = ZERO
    task_count: int = 0


def actuals_by_task(
    entries: Iterable[TimeEntryRecord],
    rates: Mapping[UUID, ResolvedRates],
) -> dict[UUID, _TaskActuals]:
    """Completed hours and billable value per task, valued at each logger's rate."""

    actuals: dict[UUID, _TaskActuals] = {}
    for entry in entries:
        if entry.task_id is None or not entry.is_completed:
            continue
        bucket = actuals.setdefault(entry.task_id, _TaskActuals())
        hours = entry_hours(entry)
        rate = RateResolver.lookup(rates, entry.profile_id).billable_rate
        bucket.hours += hours
        bucket.value += hours * rate
        if rate > ZERO and rate not in bucket.rates:
            bucket.rates.append(rate)
    return actuals


class TaskVarianceCalculator:
    """Compare estimated hours and value with tracked completed time."""

    def __init__(
        self,
        repo: RecordRepository,
        settings: Settings | None = None,
        rate_resolver: RateResolver | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings or get_settings()
        self.rate_resolver = rate_resolver or RateResolver(self.settings.default_weekly_hours)

    @property
    def tolerance(self) -> Decimal:
        return self.settings.variance_tolerance_percent

    @staticmethod
    def estimated_rate(task: TaskRecord, rates: Mapping[UUID, ResolvedRates]) -> Decimal | None:
        """Task's own rate when positive, else the assignee's billable rate when positive."""

        if task.estimated_rate is not None and task.estimated_rate > ZERO:
            return task.estimated_rate
        if task.assigned_to is not None:
            assignee_rate = RateResolver.lookup(rates, task.assigned_to).billable_rate
            if assignee_rate > ZERO:
                return assignee_rate
        return None

    # ---------- Single task ----------
    def task_variance(self, task_id: UUID) -> TaskVariance | None:
        task = self.repo.get_task(task_id)
        if task is None:
            raise RecordNotFoundError("Task", task_id)
        entries = self.repo.list_time_entries(task_ids={task.id}, completed_only=True)
        rates = self._rates_for([task], entries)
        return self.compute(task, actuals_by_task(entries, rates).get(task.id), rates)

    def compute(
        self,
        task: TaskRecord,
        actuals: _TaskActuals | None,
        rates: Mapping[UUID, ResolvedRates],
    ) -> TaskVariance | None:
        estimated_hours = or_default(task.estimated_hours, ZERO)
        estimated_rate = self.estimated_rate(task, rates)
        if estimated_hours <= ZERO or estimated_rate is None:
            return None

        actuals = actuals or _TaskActuals()
        planned_value = estimated_hours * estimated_rate
        hours_variance = actuals.hours - estimated_hours
        value_variance = actuals.value - planned_value
        value_variance_percent = percent_of(value_variance, planned_value)

        return TaskVariance(
            task_id=task.id,
            task_title=task.title,
            estimated_hours=estimated_hours,
            estimated_rate=estimated_rate,
            planned_value=planned_value,
            actual_hours=actuals.hours,
            actual_rates=tuple(actuals.rates),
            actual_value=actuals.value,
            hours_variance=hours_variance,
            hours_variance_percent=percent_of(hours_variance, estimated_hours),
            value_variance=value_variance,
            value_variance_percent=value_variance_percent,
            status=_TASK_STATUS[variance_direction(value_variance_percent, self.tolerance)],
        )

    # ---------- Project views ----------
    def project_task_variances(self, project_id: UUID) -> list[TaskVariance]:
        """Variances of the project's service-linked tasks that carry an estimate."""

        tasks = self._service_tasks(project_id)
        entries = self.repo.list_time_entries(task_ids={task.id for task in tasks}, completed_only=True)
        rates = self._rates_for(tasks, entries)
        actuals = actuals_by_task(entries, rates)

        variances = []
        for task in tasks:
            variance = self.compute(task, actuals.get(task.id), rates)
            if variance is not None:
                variances.append(variance)
        logger.debug("Computed %d task variances for project %s", len(variances), project_id)
        return variances

    def project_service_breakdown(self, project_id: UUID) -> list[ServiceBreakdownRow]:
        """Plan and actual totals per (service module, seniority level) pair."""

        tasks = self._service_tasks(project_id)
        if not tasks:
            return []
        entries = self.repo.list_time_entries(task_ids={task.id for task in tasks}, completed_only=True)
        rates = self._rates_for(tasks, entries)
        actuals = actuals_by_task(entries, rates)
        service_names = {service.id: service.name for service in self.repo.list_service_modules()}
        level_names = {level.id: level.level_name for level in self.repo.list_seniority_levels()}

        groups: dict[tuple[UUID, UUID | None], _ServiceGroup] = {}
        for task in tasks:
            key = (task.service_module_id, task.seniority_level_id)
            group = groups.setdefault(key, _ServiceGroup(*key))
            estimated_hours = or_default(task.estimated_hours, ZERO)
            group.estimated_hours += estimated_hours
            group.planned_value += estimated_hours * or_default(self.estimated_rate(task, rates), ZERO)
            task_actuals = actuals.get(task.id)
            if task_actuals is not None:
                group.actual_hours += task_actuals.hours
                group.actual_value += task_actuals.value
            group.task_count += 1

        rows = []
        for group in groups.values():
            value_variance = group.actual_value - group.planned_value
            direction = variance_direction(percent_of(value_variance, group.planned_value), self.tolerance)
            rows.append(
                ServiceBreakdownRow(
                    service_module_id=group.service_module_id,
                    service_module_name=service_names.get(group.service_module_id, "Unknown"),
                    seniority_level_id=group.seniority_level_id,
                    seniority_level_name=level_names.get(group.seniority_level_id),
                    total_estimated_hours=group.estimated_hours,
                    total_planned_value=group.planned_value,
                    total_actual_hours=group.actual_hours,
                    total_actual_value=group.actual_value,
                    hours_variance=group.actual_hours - group.estimated_hours,
                    value_variance=value_variance,
                    variance_status=_GROUP_STATUS[direction],
                    task_count=group.task_count,
                )
            )
        return sorted(rows, key=lambda row: row.total_planned_value, reverse=True)

    # ---------- Helpers ----------
    def _service_tasks(self, project_id: UUID) -> list[TaskRecord]:
        if self.repo.get_project(project_id) is None:
            raise RecordNotFoundError("Project", project_id)
        return self.repo.list_tasks(project_ids={project_id}, service_linked_only=True)

    def _rates_for(
        self,
        tasks: Iterable[TaskRecord],
        entries: Iterable[TimeEntryRecord],
    ) -> dict[UUID, ResolvedRates]:
        profile_ids = {entry.profile_id for entry in entries}
        profile_ids.update(task.assigned_to for task in tasks if task.assigned_to is not None)
        return self.rate_resolver.index(self.repo.list_profiles(profile_ids))
