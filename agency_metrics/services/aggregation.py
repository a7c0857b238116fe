"""Cost, labor, billable-time and revenue reductions.

The repository-backed methods (``costs_for_project`` and friends) fetch the
rows for one identifier and delegate to the pure grouping helpers, which batch
calculators call directly with snapshots they already hold. No intermediate
rounding happens here.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from agency_metrics.repositories.records import (
    CostRecord,
    RecordRepository,
    RevenueItemRecord,
    TaskRecord,
    TimeEntryRecord,
)
from agency_metrics.services.rates import ZERO, RateResolver, ResolvedRates, or_default


MINUTES_PER_HOUR = Decimal("60")


def entry_hours(entry: TimeEntryRecord) -> Decimal:
    """Logged hours of an entry; running entries contribute zero."""

    return Decimal(or_default(entry.duration_minutes, 0)) / MINUTES_PER_HOUR


@dataclass(slots=True)
class LaborRollup:
    cost: Decimal = ZERO
    hours: Decimal = ZERO
    entry_count: int = 0

    def add(self, hours: Decimal, internal_rate: Decimal) -> None:
        self.cost += hours * internal_rate
        self.hours += hours
        self.entry_count += 1


@dataclass(slots=True)
class BillableRollup:
    billable_value: Decimal = ZERO
    total_hours: Decimal = ZERO
    billable_hours: Decimal = ZERO


def billable_by_project(
    entries: Iterable[TimeEntryRecord],
    rates: Mapping[UUID, ResolvedRates],
) -> dict[UUID, BillableRollup]:
    """Value of completed billable time per project at each biller's rate."""

    rollups: dict[UUID, BillableRollup] = {}
    for entry in entries:
        if not entry.is_completed:
            continue
        bucket = rollups.setdefault(entry.project_id, BillableRollup())
        hours = entry_hours(entry)
        bucket.total_hours += hours
        if entry.billable:
            bucket.billable_hours += hours
            bucket.billable_value += hours * RateResolver.lookup(rates, entry.profile_id).billable_rate
    return rollups


class CostAggregator:
    """Direct project costs plus internal labor cost of logged time."""

    def __init__(self, repo: RecordRepository, rate_resolver: RateResolver | None = None) -> None:
        self.repo = repo
        self.rate_resolver = rate_resolver or RateResolver()

    # ---------- Repository-backed ----------
    def costs_for_project(self, project_id: UUID) -> Decimal:
        costs = self.repo.list_costs({project_id})
        return self.sum_costs_by_project(costs).get(project_id, ZERO)

    def labor_cost_for_project(self, project_id: UUID) -> Decimal:
        entries = self.repo.list_time_entries(project_ids={project_id})
        rates = self._rates_for(entries)
        rollup = self.labor_by_project(entries, rates).get(project_id)
        return rollup.cost if rollup else ZERO

    def labor_cost_for_service(self, service_module_id: UUID) -> Decimal:
        tasks = [
            task
            for task in self.repo.list_tasks(service_linked_only=True)
            if task.service_module_id == service_module_id
        ]
        if not tasks:
            return ZERO
        entries = self.repo.list_time_entries(task_ids={task.id for task in tasks})
        rates = self._rates_for(entries)
        rollup = self.labor_by_service(entries, {task.id: task for task in tasks}, rates).get(service_module_id)
        return rollup.cost if rollup else ZERO

    def _rates_for(self, entries: Collection[TimeEntryRecord]) -> dict[UUID, ResolvedRates]:
        if not entries:
            return {}
        profiles = self.repo.list_profiles({entry.profile_id for entry in entries})
        return self.rate_resolver.index(profiles)

    # ---------- Pure grouping ----------
    @staticmethod
    def sum_costs_by_project(costs: Iterable[CostRecord]) -> dict[UUID, Decimal]:
        totals: dict[UUID, Decimal] = {}
        for cost in costs:
            totals[cost.project_id] = totals.get(cost.project_id, ZERO) + or_default(cost.amount, ZERO)
        return totals

    @staticmethod
    def labor_by_project(
        entries: Iterable[TimeEntryRecord],
        rates: Mapping[UUID, ResolvedRates],
    ) -> dict[UUID, LaborRollup]:
        rollups: dict[UUID, LaborRollup] = {}
        for entry in entries:
            if not entry.has_duration:
                continue
            rate = RateResolver.lookup(rates, entry.profile_id).internal_rate
            rollups.setdefault(entry.project_id, LaborRollup()).add(entry_hours(entry), rate)
        return rollups

    @staticmethod
    def labor_by_service(
        entries: Iterable[TimeEntryRecord],
        tasks_by_id: Mapping[UUID, TaskRecord],
        rates: Mapping[UUID, ResolvedRates],
    ) -> dict[UUID, LaborRollup]:
        rollups: dict[UUID, LaborRollup] = {}
        for entry in entries:
            if not entry.has_duration or entry.task_id is None:
                continue
            task = tasks_by_id.get(entry.task_id)
            if task is None or task.service_module_id is None:
                continue
            rate = RateResolver.lookup(rates, entry.profile_id).internal_rate
            rollups.setdefault(task.service_module_id, LaborRollup()).add(entry_hours(entry), rate)
        return rollups


class RevenueAggregator:
    """Recognized revenue from financial items on qualifying documents."""

    def __init__(self, repo: RecordRepository, statuses: Collection[str]) -> None:
        self.repo = repo
        self.statuses = frozenset(statuses)

    def revenue_for_project(self, project_id: UUID) -> Decimal:
        items = self.repo.list_revenue_items(statuses=self.statuses, project_ids={project_id})
        return self.revenue_by_project(items).get(project_id, ZERO)

    def revenue_for_service(self, service_module_id: UUID) -> Decimal:
        items = self.repo.list_revenue_items(statuses=self.statuses, service_linked_only=True)
        return self.revenue_by_service(items).get(service_module_id, ZERO)

    def fetch_items(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        service_linked_only: bool = False,
    ) -> list[RevenueItemRecord]:
        return self.repo.list_revenue_items(
            statuses=self.statuses,
            project_ids=project_ids,
            service_linked_only=service_linked_only,
        )

    def _qualifies(self, item: RevenueItemRecord) -> bool:
        return item.document_status in self.statuses

    def revenue_by_project(self, items: Iterable[RevenueItemRecord]) -> dict[UUID, Decimal]:
        totals: dict[UUID, Decimal] = {}
        for item in items:
            if item.project_id is None or not self._qualifies(item):
                continue
            totals[item.project_id] = totals.get(item.project_id, ZERO) + or_default(item.total_price, ZERO)
        return totals

    def revenue_by_service(self, items: Iterable[RevenueItemRecord]) -> dict[UUID, Decimal]:
        totals: dict[UUID, Decimal] = {}
        for item in items:
            if item.service_module_id is None or not self._qualifies(item):
                continue
            key = item.service_module_id
            totals[key] = totals.get(key, ZERO) + or_default(item.total_price, ZERO)
        return totals
