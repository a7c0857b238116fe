"""JSON shapes for calculator results.

Money, hours and percentages leave the engine as strings rounded to two
decimals; nothing upstream rounds.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from agency_metrics.services.profitability import ServiceProfitability
from agency_metrics.services.project_financials import ProjectFinancialOverview, ProjectMargin
from agency_metrics.services.task_variance import ServiceBreakdownRow, TaskVariance
from agency_metrics.services.workload import AssignmentFeasibility, Workload

Q2 = Decimal("0.01")


def _q2(value: Decimal) -> str:
    return str(value.quantize(Q2, rounding=ROUND_HALF_UP))


def _q2_or_none(value: Decimal | None) -> str | None:
    return _q2(value) if value is not None else None


def _id_or_none(value: object | None) -> str | None:
    return str(value) if value is not None else None


def serialize_service_profitability(row: ServiceProfitability) -> dict[str, object]:
    return {
        "service_module_id": str(row.service_module_id),
        "service_name": row.service_name,
        "category": row.category,
        "revenue": _q2(row.revenue),
        "cost": _q2(row.cost),
        "profit": _q2(row.profit),
        "margin_percent": _q2(row.margin_percent),
        "hours_tracked": _q2(row.hours_tracked),
        "activity_count": row.activity_count,
    }


def serialize_overview(overview: ProjectFinancialOverview) -> dict[str, object]:
    return {
        "project_id": str(overview.project_id),
        "budget_total": _q2(overview.budget_total),
        "direct_costs": _q2(overview.direct_costs),
        "labor_cost": _q2(overview.labor_cost),
        "costs": _q2(overview.costs),
        "billable_value": _q2(overview.billable_value),
        "total": _q2(overview.total),
        "revenue": _q2(overview.revenue),
        "total_hours": _q2(overview.total_hours),
        "billable_hours": _q2(overview.billable_hours),
        "spend_ratio": _q2_or_none(overview.spend_ratio),
        "progress": _q2(overview.progress),
        "is_over_budget": overview.is_over_budget,
    }


def serialize_margin(margin: ProjectMargin) -> dict[str, object]:
    return {
        "project_id": str(margin.project_id),
        "revenue": _q2(margin.revenue),
        "billable_value": _q2(margin.billable_value),
        "costs": _q2(margin.costs),
        "profit": _q2(margin.profit),
        "margin_percentage": _q2(margin.margin_percentage),
        "status": margin.status.value,
    }


def serialize_task_variance(variance: TaskVariance) -> dict[str, object]:
    return {
        "task_id": str(variance.task_id),
        "task_title": variance.task_title,
        "estimated_hours": _q2(variance.estimated_hours),
        "estimated_rate": _q2(variance.estimated_rate),
        "planned_value": _q2(variance.planned_value),
        "actual_hours": _q2(variance.actual_hours),
        "actual_rates": [_q2(rate) for rate in variance.actual_rates],
        "actual_value": _q2(variance.actual_value),
        "hours_variance": _q2(variance.hours_variance),
        "hours_variance_percent": _q2(variance.hours_variance_percent),
        "value_variance": _q2(variance.value_variance),
        "value_variance_percent": _q2(variance.value_variance_percent),
        "status": variance.status.value,
    }


def serialize_breakdown_row(row: ServiceBreakdownRow) -> dict[str, object]:
    return {
        "service_module_id": str(row.service_module_id),
        "service_module_name": row.service_module_name,
        "seniority_level_id": _id_or_none(row.seniority_level_id),
        "seniority_level_name": row.seniority_level_name,
        "total_estimated_hours": _q2(row.total_estimated_hours),
        "total_planned_value": _q2(row.total_planned_value),
        "total_actual_hours": _q2(row.total_actual_hours),
        "total_actual_value": _q2(row.total_actual_value),
        "hours_variance": _q2(row.hours_variance),
        "value_variance": _q2(row.value_variance),
        "variance_status": row.variance_status.value,
        "task_count": row.task_count,
    }


def serialize_workload(workload: Workload) -> dict[str, object]:
    return {
        "profile_id": str(workload.profile_id),
        "window_start": workload.window_start.isoformat(),
        "window_end": workload.window_end.isoformat(),
        "window_days": workload.window_days,
        "weekly_hours": _q2(workload.weekly_hours),
        "capacity_hours": _q2(workload.capacity_hours),
        "total_planned_hours": _q2(workload.total_planned_hours),
        "utilization_percentage": _q2(workload.utilization_percentage),
        "assigned_tasks": workload.assigned_tasks,
        "assigned_projects": workload.assigned_projects,
    }


def serialize_feasibility(result: AssignmentFeasibility) -> dict[str, object]:
    return {
        "profile_id": str(result.profile_id),
        "project_id": str(result.project_id),
        "threshold_percent": _q2(result.threshold_percent),
        "can_assign": result.can_assign,
        "reason": result.reason,
        "current_utilization": _q2(result.current_utilization),
        "projected_utilization": _q2(result.projected_utilization),
        "additional_hours": _q2(result.additional_hours),
    }
