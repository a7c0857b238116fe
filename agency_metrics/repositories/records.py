"""Flat read projections and the repository interface consumed by calculators.

Calculators never touch ORM rows or relation objects. Each projection is a
frozen dataclass holding exactly the columns the engine aggregates, with
nullable source columns left as ``None``; defaulting happens in
``agency_metrics.services.rates``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True, slots=True)
class ProjectRecord:
    id: UUID
    title: str
    status: str
    budget_total: Decimal | None
    start_date: date | None
    deadline: date | None


@dataclass(frozen=True, slots=True)
class TaskRecord:
    id: UUID
    project_id: UUID
    title: str
    status: str
    assigned_to: UUID | None
    service_module_id: UUID | None
    seniority_level_id: UUID | None
    estimated_hours: Decimal | None
    estimated_rate: Decimal | None
    start_date: date | None
    due_date: date | None


@dataclass(frozen=True, slots=True)
class ProfileRecord:
    id: UUID
    full_name: str | None
    role: str
    weekly_hours: Decimal | None
    billable_hourly_rate: Decimal | None
    internal_cost_per_hour: Decimal | None


@dataclass(frozen=True, slots=True)
class TimeEntryRecord:
    id: UUID
    project_id: UUID
    task_id: UUID | None
    profile_id: UUID
    end_time: datetime | None
    duration_minutes: int | None
    billable: bool
    status: str

    @property
    def is_completed(self) -> bool:
        """Entry has been stopped (end_time recorded)."""

        return self.end_time is not None

    @property
    def has_duration(self) -> bool:
        return self.duration_minutes is not None


@dataclass(frozen=True, slots=True)
class CostRecord:
    id: UUID
    project_id: UUID
    amount: Decimal | None


@dataclass(frozen=True, slots=True)
class RevenueItemRecord:
    """Financial item joined to the status and project of its document."""

    id: UUID
    document_id: UUID
    project_id: UUID | None
    document_status: str
    service_module_id: UUID | None
    seniority_level_id: UUID | None
    total_price: Decimal | None


@dataclass(frozen=True, slots=True)
class ServiceModuleRecord:
    id: UUID
    name: str
    category: str
    is_active: bool


@dataclass(frozen=True, slots=True)
class SeniorityLevelRecord:
    id: UUID
    level_name: str
    level_order: int


@dataclass(frozen=True, slots=True)
class ProjectMemberRecord:
    project_id: UUID
    profile_id: UUID
    role: str | None


class RecordRepository(ABC):
    """Read access to source-of-truth records.

    Every ``list_*`` method treats a ``None`` filter as "no filter" and an
    empty collection as "match nothing", so batch callers can fetch a whole
    table once and group in memory.
    """

    @abstractmethod
    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        pass

    @abstractmethod
    def list_projects(self, project_ids: Collection[UUID] | None = None) -> list[ProjectRecord]:
        pass

    @abstractmethod
    def get_task(self, task_id: UUID) -> TaskRecord | None:
        pass

    @abstractmethod
    def list_tasks(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        assignee_ids: Collection[UUID] | None = None,
        service_linked_only: bool = False,
    ) -> list[TaskRecord]:
        pass

    @abstractmethod
    def get_profile(self, profile_id: UUID) -> ProfileRecord | None:
        pass

    @abstractmethod
    def list_profiles(self, profile_ids: Collection[UUID] | None = None) -> list[ProfileRecord]:
        pass

    @abstractmethod
    def list_time_entries(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        task_ids: Collection[UUID] | None = None,
        completed_only: bool = False,
    ) -> list[TimeEntryRecord]:
        pass

    @abstractmethod
    def list_costs(self, project_ids: Collection[UUID] | None = None) -> list[CostRecord]:
        pass

    @abstractmethod
    def list_revenue_items(
        self,
        *,
        statuses: Collection[str],
        project_ids: Collection[UUID] | None = None,
        service_linked_only: bool = False,
    ) -> list[RevenueItemRecord]:
        pass

    @abstractmethod
    def list_service_modules(self, *, active_only: bool = False) -> list[ServiceModuleRecord]:
        pass

    @abstractmethod
    def list_seniority_levels(self) -> list[SeniorityLevelRecord]:
        pass

    @abstractmethod
    def list_project_members(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        profile_ids: Collection[UUID] | None = None,
    ) -> list[ProjectMemberRecord]:
        pass
