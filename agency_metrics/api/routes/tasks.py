"""Task plan-vs-actual endpoint."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends

from agency_metrics.api.dependencies import get_record_repository
from agency_metrics.api.serializers import serialize_task_variance
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.services.task_variance import TaskVarianceCalculator

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("/{task_id}/variance")
def get_task_variance(
    task_id: UUID,
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    """``variance`` is null when the task has no estimate or no resolvable rate."""

    variance = TaskVarianceCalculator(repo).task_variance(task_id)
    return {"variance": serialize_task_variance(variance) if variance is not None else None}
