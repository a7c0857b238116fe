"""Cross-project reporting endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from agency_metrics.api.dependencies import get_record_repository
from agency_metrics.api.serializers import serialize_service_profitability
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.services.profitability import ProfitabilityCalculator

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/service-profitability")
def report_service_profitability(
    repo: RecordRepository = Depends(get_record_repository),
) -> dict[str, object]:
    rows = ProfitabilityCalculator(repo).service_report()
    return {"items": [serialize_service_profitability(row) for row in rows]}
