"""Rate and capacity defaulting for profiles."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal
from typing import TypeVar
from uuid import UUID

from agency_metrics.repositories.records import ProfileRecord

ZERO = Decimal("0")
DEFAULT_WEEKLY_HOURS = Decimal("40")

T = TypeVar("T")


def or_default(value: T | None, fallback: T) -> T:
    """Return ``value`` unless it is ``None``.

    Falsy-but-present values such as ``Decimal("0")`` are kept; callers that
    want zero to fall back too must check that explicitly.
    """

    return fallback if value is None else value


@dataclass(frozen=True, slots=True)
class ResolvedRates:
    billable_rate: Decimal
    internal_rate: Decimal


ZERO_RATES = ResolvedRates(billable_rate=ZERO, internal_rate=ZERO)


class RateResolver:
    """Resolve hourly rates and weekly capacity with the engine's defaults."""

    def __init__(self, default_weekly_hours: Decimal = DEFAULT_WEEKLY_HOURS) -> None:
        self.default_weekly_hours = default_weekly_hours

    @staticmethod
    def resolve(profile: ProfileRecord | None) -> ResolvedRates:
        if profile is None:
            return ZERO_RATES
        return ResolvedRates(
            billable_rate=or_default(profile.billable_hourly_rate, ZERO),
            internal_rate=or_default(profile.internal_cost_per_hour, ZERO),
        )

    def weekly_hours(self, profile: ProfileRecord | None) -> Decimal:
        # Zero capacity is treated as unset, same as a missing value.
        hours = None if profile is None else profile.weekly_hours
        if not hours:
            return self.default_weekly_hours
        return hours

    def index(self, profiles: Iterable[ProfileRecord]) -> dict[UUID, ResolvedRates]:
        return {profile.id: self.resolve(profile) for profile in profiles}

    @staticmethod
    def lookup(rates: dict[UUID, ResolvedRates], profile_id: UUID) -> ResolvedRates:
        return rates.get(profile_id, ZERO_RATES)
