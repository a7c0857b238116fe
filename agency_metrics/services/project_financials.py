"""Project spend-vs-budget overview and margin tiers."""

from __future__ import annotations

import enum
import logging
from collections.abc import Collection
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from agency_metrics.core.config import Settings, get_settings
from agency_metrics.core.exceptions import RecordNotFoundError
from agency_metrics.repositories.records import ProjectRecord, RecordRepository
from agency_metrics.services.aggregation import (
    BillableRollup,
    CostAggregator,
    LaborRollup,
    RevenueAggregator,
    billable_by_project,
)
from agency_metrics.services.profitability import HUNDRED, margin_percent
from agency_metrics.services.rates import ZERO, RateResolver, or_default

logger = logging.getLogger(__name__)

ONE = Decimal("1")


class MarginStatus(str, enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    POOR = "poor"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        """0 for excellent up to 4 for critical."""

        return _SEVERITY[self]


_SEVERITY = {
    MarginStatus.EXCELLENT: 0,
    MarginStatus.GOOD: 1,
    MarginStatus.ACCEPTABLE: 2,
    MarginStatus.POOR: 3,
    MarginStatus.CRITICAL: 4,
}

# Inclusive lower bounds, checked top-down. Anything below the last is critical.
MARGIN_TIERS: tuple[tuple[Decimal, MarginStatus], ...] = (
    (Decimal("30"), MarginStatus.EXCELLENT),
    (Decimal("20"), MarginStatus.GOOD),
    (Decimal("10"), MarginStatus.ACCEPTABLE),
    (Decimal("0"), MarginStatus.POOR),
)


def classify_margin(margin_percentage: Decimal) -> MarginStatus:
    for lower_bound, tier in MARGIN_TIERS:
        if margin_percentage >= lower_bound:
            return tier
    return MarginStatus.CRITICAL


@dataclass(frozen=True, slots=True)
class ProjectFinancialOverview:
    project_id: UUID
    direct_costs: Decimal
    labor_cost: Decimal
    costs: Decimal
    billable_value: Decimal
    total: Decimal
    total_hours: Decimal
    billable_hours: Decimal
    revenue: Decimal
    budget_total: Decimal
    # total / budget_total without clamping; None when there is no budget.
    spend_ratio: Decimal | None
    progress: Decimal

    @property
    def is_over_budget(self) -> bool:
        return self.spend_ratio is not None and self.spend_ratio > ONE


@dataclass(frozen=True, slots=True)
class ProjectMargin:
    project_id: UUID
    revenue: Decimal
    billable_value: Decimal
    costs: Decimal
    profit: Decimal
    margin_percentage: Decimal
    status: MarginStatus


class ProjectFinancialOverviewCalculator:
    """Direct costs, internal labor and billable time value against budget."""

    def __init__(
        self,
        repo: RecordRepository,
        settings: Settings | None = None,
        rate_resolver: RateResolver | None = None,
    ) -> None:
        self.repo = repo
        self.settings = settings or get_settings()
        self.rate_resolver = rate_resolver or RateResolver(self.settings.default_weekly_hours)
        self.revenue = RevenueAggregator(repo, self.settings.revenue_document_statuses)

    def overview(self, project_id: UUID) -> ProjectFinancialOverview:
        project = self.repo.get_project(project_id)
        if project is None:
            raise RecordNotFoundError("Project", project_id)
        return self._compute([project])[project.id]

    def overviews(self, project_ids: Collection[UUID] | None = None) -> dict[UUID, ProjectFinancialOverview]:
        """Overview per project; ``None`` means every project in the store.

        Unknown identifiers are omitted from the result.
        """

        projects = self.repo.list_projects(project_ids)
        return self._compute(projects)

    def _compute(self, projects: list[ProjectRecord]) -> dict[UUID, ProjectFinancialOverview]:
        if not projects:
            return {}
        ids = {project.id for project in projects}
        costs = self.repo.list_costs(ids)
        entries = self.repo.list_time_entries(project_ids=ids)
        revenue_items = self.revenue.fetch_items(project_ids=ids)
        profiles = self.repo.list_profiles({entry.profile_id for entry in entries})
        rates = self.rate_resolver.index(profiles)

        direct_by_project = CostAggregator.sum_costs_by_project(costs)
        labor = CostAggregator.labor_by_project(entries, rates)
        billable = billable_by_project(entries, rates)
        revenue = self.revenue.revenue_by_project(revenue_items)

        result: dict[UUID, ProjectFinancialOverview] = {}
        for project in projects:
            direct_costs = direct_by_project.get(project.id, ZERO)
            labor_cost = (labor.get(project.id) or LaborRollup()).cost
            time_value = billable.get(project.id) or BillableRollup()
            project_costs = direct_costs + labor_cost
            total = project_costs + time_value.billable_value
            budget = or_default(project.budget_total, ZERO)

            spend_ratio = total / budget if budget > ZERO else None
            progress = min(spend_ratio, ONE) * HUNDRED if spend_ratio is not None else ZERO

            result[project.id] = ProjectFinancialOverview(
                project_id=project.id,
                direct_costs=direct_costs,
                labor_cost=labor_cost,
                costs=project_costs,
                billable_value=time_value.billable_value,
                total=total,
                total_hours=time_value.total_hours,
                billable_hours=time_value.billable_hours,
                revenue=revenue.get(project.id, ZERO),
                budget_total=budget,
                spend_ratio=spend_ratio,
                progress=progress,
            )
        logger.debug("Financial overview computed for %d projects", len(result))
        return result


class ProjectMarginCalculator:
    """Profit of billable time over project costs as a share of recognized revenue."""

    def __init__(
        self,
        repo: RecordRepository,
        settings: Settings | None = None,
        overview_calculator: ProjectFinancialOverviewCalculator | None = None,
    ) -> None:
        self.overview_calculator = overview_calculator or ProjectFinancialOverviewCalculator(repo, settings)

    @staticmethod
    def from_overview(overview: ProjectFinancialOverview) -> ProjectMargin:
        profit = overview.billable_value - overview.costs
        percentage = margin_percent(profit, overview.revenue)
        return ProjectMargin(
            project_id=overview.project_id,
            revenue=overview.revenue,
            billable_value=overview.billable_value,
            costs=overview.costs,
            profit=profit,
            margin_percentage=percentage,
            status=classify_margin(percentage),
        )

    def margin(self, project_id: UUID) -> ProjectMargin:
        return self.from_overview(self.overview_calculator.overview(project_id))

    def margins(self, project_ids: Collection[UUID] | None = None) -> dict[UUID, ProjectMargin]:
        overviews = self.overview_calculator.overviews(project_ids)
        return {project_id: self.from_overview(overview) for project_id, overview in overviews.items()}
