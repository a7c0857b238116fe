"""Utilization and assignment feasibility endpoints."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from agency_metrics.api.dependencies import get_date_window, get_record_repository
from agency_metrics.api.serializers import serialize_feasibility, serialize_workload
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.services.workload import AssignmentFeasibilityChecker, DateWindow, WorkloadCalculator

router = APIRouter(tags=["workload"])


@router.get("/workload")
def list_workloads(
    profile_id: list[UUID] | None = Query(default=None),
    window: DateWindow = Depends(get_date_window),
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    workloads = WorkloadCalculator(repo).workloads(profile_id, window)
    return {"items": [serialize_workload(workload) for workload in workloads.values()]}


@router.get("/profiles/{profile_id}/workload")
def get_profile_workload(
    profile_id: UUID,
    window: DateWindow = Depends(get_date_window),
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    return serialize_workload(WorkloadCalculator(repo).profile_workload(profile_id, window))


@router.get("/profiles/{profile_id}/assignment-feasibility")
def get_assignment_feasibility(
    profile_id: UUID,
    project_id: UUID,
    threshold_percent: Decimal | None = None,
    window: DateWindow = Depends(get_date_window),
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    checker = AssignmentFeasibilityChecker(repo)
    return serialize_feasibility(checker.check(profile_id, project_id, window, threshold_percent))
