"""Project financial overview, margin and variance endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from agency_metrics.api.dependencies import get_record_repository
from agency_metrics.api.serializers import (
    serialize_breakdown_row,
    serialize_margin,
    serialize_overview,
    serialize_task_variance,
)
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.services.project_financials import ProjectFinancialOverviewCalculator, ProjectMarginCalculator
from agency_metrics.services.task_variance import TaskVarianceCalculator

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("/financial-overview")
def list_financial_overviews(
    project_id: list[UUID] | None = Query(default=None),
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    overviews = ProjectFinancialOverviewCalculator(repo).overviews(project_id)
    return {"items": [serialize_overview(overview) for overview in overviews.values()]}


@router.get("/margins")
def list_margins(
    project_id: list[UUID] | None = Query(default=None),
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    margins = ProjectMarginCalculator(repo).margins(project_id)
    return {"items": [serialize_margin(margin) for margin in margins.values()]}


@router.get("/{project_id}/financial-overview")
def get_financial_overview(
    project_id: UUID,
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    return serialize_overview(ProjectFinancialOverviewCalculator(repo).overview(project_id))


@router.get("/{project_id}/margin")
def get_margin(
    project_id: UUID,
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    return serialize_margin(ProjectMarginCalculator(repo).margin(project_id))


@router.get("/{project_id}/task-variances")
def list_task_variances(
    project_id: UUID,
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    variances = TaskVarianceCalculator(repo).project_task_variances(project_id)
    return {"items": [serialize_task_variance(variance) for variance in variances]}


@router.get("/{project_id}/service-breakdown")
def get_service_breakdown(
    project_id: UUID,
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    rows = TaskVarianceCalculator(repo).project_service_breakdown(project_id)
    return {"items": [serialize_breakdown_row(row) for row in rows]}
