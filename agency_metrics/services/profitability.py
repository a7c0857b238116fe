"""Service-module profitability report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from agency_metrics.core.config import Settings, get_settings
from agency_metrics.repositories.records import RecordRepository
from agency_metrics.services.aggregation import CostAggregator, LaborRollup, RevenueAggregator
from agency_metrics.services.rates import ZERO, RateResolver

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def margin_percent(profit: Decimal, revenue: Decimal) -> Decimal:
    """Profit share of revenue in percent; zero when there is no revenue."""

    if revenue <= ZERO:
        return ZERO
    return profit / revenue * HUNDRED


@dataclass(frozen=True, slots=True)
class ServiceProfitability:
    service_module_id: UUID
    service_name: str
    category: str
    revenue: Decimal
    cost: Decimal
    profit: Decimal
    margin_percent: Decimal
    hours_tracked: Decimal
    # Counted time-entry rows, an engagement proxy rather than distinct tasks.
    activity_count: int


class ProfitabilityCalculator:
    """Revenue minus internal labor cost for every active service module."""

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

    def service_report(self) -> list[ServiceProfitability]:
        services = self.repo.list_service_modules(active_only=True)
        revenue_items = self.revenue.fetch_items(service_linked_only=True)
        tasks = self.repo.list_tasks(service_linked_only=True)
        entries = self.repo.list_time_entries(task_ids={task.id for task in tasks})
        profiles = self.repo.list_profiles({entry.profile_id for entry in entries})

        revenue_by_service = self.revenue.revenue_by_service(revenue_items)
        labor_by_service = CostAggregator.labor_by_service(
            entries,
            {task.id: task for task in tasks},
            self.rate_resolver.index(profiles),
        )

        report: list[ServiceProfitability] = []
        for service in services:
            revenue = revenue_by_service.get(service.id, ZERO)
            labor = labor_by_service.get(service.id) or LaborRollup()
            profit = revenue - labor.cost
            report.append(
                ServiceProfitability(
                    service_module_id=service.id,
                    service_name=service.name,
                    category=service.category,
                    revenue=revenue,
                    cost=labor.cost,
                    profit=profit,
                    margin_percent=margin_percent(profit, revenue),
                    hours_tracked=labor.hours,
                    activity_count=labor.entry_count,
                )
            )

        # Stable: equal profits keep the service list order.
        report = sorted(report, key=lambda row: row.profit, reverse=True)
        logger.debug("Service profitability computed for %d services", len(report))
        return report
