"""SQLAlchemy implementation of the record repository."""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from datetime import date, datetime
from typing import Any, NoReturn
from uuid import UUID

from sqlalchemy import Select, and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agency_metrics.core.exceptions import DataAccessError
from agency_metrics.models.entities import (
    Cost,
    DocumentStatus,
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
from agency_metrics.repositories.records import (
    CostRecord,
    ProfileRecord,
    ProjectMemberRecord,
    ProjectRecord,
    RecordRepository,
    RevenueItemRecord,
    SeniorityLevelRecord,
    ServiceModuleRecord,
    TaskRecord,
    TimeEntryRecord,
)

logger = logging.getLogger(__name__)


def _as_date(value: date | datetime | None) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    return value


def _enum_value(value: Any) -> str:
    return getattr(value, "value", value)


def _is_empty_filter(values: Collection[Any] | None) -> bool:
    return values is not None and len(values) == 0


class SqlRecordRepository(RecordRepository):
    """Read-only queries over the agency tables, one statement per call."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Execution ----------
    def _scalars(self, table: str, statement: Select) -> Sequence[Any]:
        try:
            return self.db.scalars(statement).all()
        except SQLAlchemyError as exc:
            self._fail(table, exc)

    def _rows(self, table: str, statement: Select) -> Sequence[Any]:
        try:
            return self.db.execute(statement).all()
        except SQLAlchemyError as exc:
            self._fail(table, exc)

    def _fail(self, table: str, exc: SQLAlchemyError) -> NoReturn:
        logger.error("Read from %s failed: %s", table, exc)
        self.db.rollback()
        raise DataAccessError(table, str(exc)) from exc

    # ---------- Projection builders ----------
    @staticmethod
    def _project(row: Project) -> ProjectRecord:
        return ProjectRecord(
            id=row.id,
            title=row.title,
            status=_enum_value(row.status),
            budget_total=row.budget_total,
            start_date=row.start_date,
            deadline=row.deadline,
        )

    @staticmethod
    def _task(row: Task) -> TaskRecord:
        return TaskRecord(
            id=row.id,
            project_id=row.project_id,
            title=row.title,
            status=_enum_value(row.status),
            assigned_to=row.assigned_to,
            service_module_id=row.service_module_id,
            seniority_level_id=row.seniority_level_id,
            estimated_hours=row.estimated_hours,
            estimated_rate=row.estimated_rate,
            start_date=_as_date(row.start_date),
            due_date=_as_date(row.due_date),
        )

    @staticmethod
    def _profile(row: Profile) -> ProfileRecord:
        return ProfileRecord(
            id=row.id,
            full_name=row.full_name,
            role=_enum_value(row.role),
            weekly_hours=row.weekly_hours,
            billable_hourly_rate=row.billable_hourly_rate,
            internal_cost_per_hour=row.internal_cost_per_hour,
        )

    # ---------- Projects ----------
    def get_project(self, project_id: UUID) -> ProjectRecord | None:
        rows = self._scalars("projects", select(Project).where(Project.id == project_id))
        return self._project(rows[0]) if rows else None

    def list_projects(self, project_ids: Collection[UUID] | None = None) -> list[ProjectRecord]:
        if _is_empty_filter(project_ids):
            return []
        statement = select(Project).order_by(Project.created_at.asc(), Project.id.asc())
        if project_ids is not None:
            statement = statement.where(Project.id.in_(project_ids))
        return [self._project(row) for row in self._scalars("projects", statement)]

    # ---------- Tasks ----------
    def get_task(self, task_id: UUID) -> TaskRecord | None:
        rows = self._scalars("tasks", select(Task).where(Task.id == task_id))
        return self._task(rows[0]) if rows else None

    def list_tasks(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        assignee_ids: Collection[UUID] | None = None,
        service_linked_only: bool = False,
    ) -> list[TaskRecord]:
        if _is_empty_filter(project_ids) or _is_empty_filter(assignee_ids):
            return []
        conditions = []
        if project_ids is not None:
            conditions.append(Task.project_id.in_(project_ids))
        if assignee_ids is not None:
            conditions.append(Task.assigned_to.in_(assignee_ids))
        if service_linked_only:
            conditions.append(Task.service_module_id.is_not(None))

        statement = select(Task).order_by(Task.project_id.asc(), Task.id.asc())
        if conditions:
            statement = statement.where(and_(*conditions))
        return [self._task(row) for row in self._scalars("tasks", statement)]

    # ---------- Profiles ----------
    def get_profile(self, profile_id: UUID) -> ProfileRecord | None:
        rows = self._scalars("profiles", select(Profile).where(Profile.id == profile_id))
        return self._profile(rows[0]) if rows else None

    def list_profiles(self, profile_ids: Collection[UUID] | None = None) -> list[ProfileRecord]:
        if _is_empty_filter(profile_ids):
            return []
        statement = select(Profile).order_by(Profile.id.asc())
        if profile_ids is not None:
            statement = statement.where(Profile.id.in_(profile_ids))
        return [self._profile(row) for row in self._scalars("profiles", statement)]

    # ---------- Time entries ----------
    def list_time_entries(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        task_ids: Collection[UUID] | None = None,
        completed_only: bool = False,
    ) -> list[TimeEntryRecord]:
        if _is_empty_filter(project_ids) or _is_empty_filter(task_ids):
            return []
        conditions = []
        if project_ids is not None:
            conditions.append(TimeEntry.project_id.in_(project_ids))
        if task_ids is not None:
            conditions.append(TimeEntry.task_id.in_(task_ids))
        if completed_only:
            conditions.append(TimeEntry.end_time.is_not(None))

        statement = select(TimeEntry).order_by(TimeEntry.start_time.asc(), TimeEntry.id.asc())
        if conditions:
            statement = statement.where(and_(*conditions))
        return [
            TimeEntryRecord(
                id=row.id,
                project_id=row.project_id,
                task_id=row.task_id,
                profile_id=row.profile_id,
                end_time=row.end_time,
                duration_minutes=row.duration_minutes,
                billable=bool(row.billable),
                status=_enum_value(row.status),
            )
            for row in self._scalars("time_entries", statement)
        ]

    # ---------- Costs ----------
    def list_costs(self, project_ids: Collection[UUID] | None = None) -> list[CostRecord]:
        if _is_empty_filter(project_ids):
            return []
        statement = select(Cost).order_by(Cost.created_at.asc(), Cost.id.asc())
        if project_ids is not None:
            statement = statement.where(Cost.project_id.in_(project_ids))
        return [
            CostRecord(id=row.id, project_id=row.project_id, amount=row.amount)
            for row in self._scalars("costs", statement)
        ]

    # ---------- Revenue ----------
    def list_revenue_items(
        self,
        *,
        statuses: Collection[str],
        project_ids: Collection[UUID] | None = None,
        service_linked_only: bool = False,
    ) -> list[RevenueItemRecord]:
        known = [status for status in statuses if status in DocumentStatus._value2member_map_]
        if len(known) != len(statuses):
            logger.warning("Ignoring unknown document statuses: %s", sorted(set(statuses) - set(known)))
        if not known or _is_empty_filter(project_ids):
            return []

        conditions = [FinancialDocument.status.in_(known)]
        if project_ids is not None:
            conditions.append(FinancialDocument.project_id.in_(project_ids))
        if service_linked_only:
            conditions.append(FinancialItem.service_module_id.is_not(None))

        statement = (
            select(FinancialItem, FinancialDocument.status, FinancialDocument.project_id)
            .join(FinancialDocument, FinancialDocument.id == FinancialItem.document_id)
            .where(and_(*conditions))
            .order_by(FinancialItem.document_id.asc(), FinancialItem.id.asc())
        )
        return [
            RevenueItemRecord(
                id=item.id,
                document_id=item.document_id,
                project_id=project_id,
                document_status=_enum_value(document_status),
                service_module_id=item.service_module_id,
                seniority_level_id=item.seniority_level_id,
                total_price=item.total_price,
            )
            for item, document_status, project_id in self._rows("financial_items", statement)
        ]

    # ---------- Catalog ----------
    def list_service_modules(self, *, active_only: bool = False) -> list[ServiceModuleRecord]:
        statement = select(ServiceModule).order_by(ServiceModule.service_module.asc(), ServiceModule.id.asc())
        if active_only:
            statement = statement.where(ServiceModule.is_active.is_(True))
        return [
            ServiceModuleRecord(
                id=row.id,
                name=row.service_module,
                category=_enum_value(row.category),
                is_active=bool(row.is_active),
            )
            for row in self._scalars("service_modules", statement)
        ]

    def list_seniority_levels(self) -> list[SeniorityLevelRecord]:
        statement = select(SeniorityLevel).order_by(SeniorityLevel.level_order.asc())
        return [
            SeniorityLevelRecord(id=row.id, level_name=row.level_name, level_order=row.level_order)
            for row in self._scalars("seniority_levels", statement)
        ]

    # ---------- Staffing ----------
    def list_project_members(
        self,
        *,
        project_ids: Collection[UUID] | None = None,
        profile_ids: Collection[UUID] | None = None,
    ) -> list[ProjectMemberRecord]:
        if _is_empty_filter(project_ids) or _is_empty_filter(profile_ids):
            return []
        conditions = []
        if project_ids is not None:
            conditions.append(ProjectMember.project_id.in_(project_ids))
        if profile_ids is not None:
            conditions.append(ProjectMember.profile_id.in_(profile_ids))

        statement = select(ProjectMember).order_by(ProjectMember.project_id.asc(), ProjectMember.profile_id.asc())
        if conditions:
            statement = statement.where(and_(*conditions))
        return [
            ProjectMemberRecord(project_id=row.project_id, profile_id=row.profile_id, role=row.role)
            for row in self._scalars("project_members", statement)
        ]
