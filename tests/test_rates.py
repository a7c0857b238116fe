from __future__ import annotations

import uuid
from decimal import Decimal

from agency_metrics.repositories.records import ProfileRecord
from agency_metrics.services.rates import ZERO_RATES, RateResolver, ResolvedRates, or_default


def _profile(**overrides) -> ProfileRecord:
    values = {
        "id": uuid.uuid4(),
        "full_name": "Sam",
        "role": "employee",
        "weekly_hours": Decimal("32"),
        "billable_hourly_rate": Decimal("95"),
        "internal_cost_per_hour": Decimal("45"),
    }
    values.update(overrides)
    return ProfileRecord(**values)


def test_or_default_keeps_present_zero() -> None:
    assert or_default(None, Decimal("40")) == Decimal("40")
    assert or_default(Decimal("0"), Decimal("40")) == Decimal("0")


def test_resolve_uses_stored_rates() -> None:
    assert RateResolver.resolve(_profile()) == ResolvedRates(Decimal("95"), Decimal("45"))


def test_resolve_defaults_null_rates_to_zero() -> None:
    rates = RateResolver.resolve(_profile(billable_hourly_rate=None, internal_cost_per_hour=None))

    assert rates == ZERO_RATES


def test_resolve_missing_profile_is_zero() -> None:
    assert RateResolver.resolve(None) == ZERO_RATES


def test_weekly_hours_falls_back_for_null_or_zero() -> None:
    resolver = RateResolver(default_weekly_hours=Decimal("38"))

    assert resolver.weekly_hours(_profile()) == Decimal("32")
    assert resolver.weekly_hours(_profile(weekly_hours=None)) == Decimal("38")
    assert resolver.weekly_hours(_profile(weekly_hours=Decimal("0"))) == Decimal("38")
    assert resolver.weekly_hours(None) == Decimal("38")


def test_lookup_unknown_profile_resolves_to_zero_rates() -> None:
    known = _profile()
    index = RateResolver().index([known])

    assert RateResolver.lookup(index, known.id).billable_rate == Decimal("95")
    assert RateResolver.lookup(index, uuid.uuid4()) == ZERO_RATES
