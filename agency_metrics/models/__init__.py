"""ORM model package."""

from agency_metrics.models.entities import (
    Cost,
    DocumentStatus,
    DocumentType,
    FinancialDocument,
    FinancialItem,
    Profile,
    Project,
    ProjectMember,
    ProjectStatus,
    SeniorityLevel,
    ServiceCategory,
    ServiceModule,
    Task,
    TaskStatus,
    TimeEntry,
    TimeEntryStatus,
    UserRole,
)

__all__ = [
    "Cost",
    "DocumentStatus",
    "DocumentType",
    "FinancialDocument",
    "FinancialItem",
    "Profile",
    "Project",
    "ProjectMember",
    "ProjectStatus",
    "SeniorityLevel",
    "ServiceCategory",
    "ServiceModule",
    "Task",
    "TaskStatus",
    "TimeEntry",
    "TimeEntryStatus",
    "UserRole",
]
