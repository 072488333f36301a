"""Pricing engine: cost pipeline, unit modes, line items."""
from decimal import Decimal

import pytest

from agency_pricing.engine.calculator import PricingEngine
from agency_pricing.engine.units import convert_units, derive_hourly_rate, to_days
from agency_pricing.schemas.calculation import CalculationMode


class TestComputeCost:
    def test_daily_scenario(self, engine, client_types):
        result = engine.compute_cost({1: Decimal(10)}, CalculationMode.DAILY, client_types[0], 40)
        assert result.internal_cost == Decimal("3500000")
        assert result.cost_after_coefficient == Decimal("4200000")
        assert result.recommended_price == Decimal("5880000")
        assert result.margin_amount == Decimal("1680000")

    def test_hourly_matches_daily(self, engine, client_types):
        daily = engine.compute_cost({1: Decimal(10)}, CalculationMode.DAILY, client_types[0], 40)
        hourly = engine.compute_cost({1: Decimal(80)}, CalculationMode.HOURLY, client_types[0], 40)
        assert hourly.internal_cost == daily.internal_cost == Decimal("3500000")
        assert hourly.recommended_price == daily.recommended_price

    def test_neutral_coefficient_keeps_internal_cost(self, engine, client_types):
        result = engine.compute_cost({1: Decimal("3.5"), 2: Decimal(2)}, client_type=client_types[1])
        assert result.cost_after_coefficient == result.internal_cost

    def test_no_client_type_means_coefficient_one(self, engine):
        result = engine.compute_cost({2: Decimal(1)})
        assert result.coefficient == Decimal(1)
        assert result.cost_after_coefficient == Decimal("200000")

    @pytest.mark.parametrize("margin", [None, 0])
    def test_zero_margin_keeps_cost_after_coefficient(self, engine, client_types, margin):
        result = engine.compute_cost({1: Decimal(2)}, client_type=client_types[2], margin_percentage=margin)
        assert result.recommended_price == result.cost_after_coefficient

    def test_inactive_rate_contributes_nothing(self, engine):
        with_legacy = engine.compute_cost({1: Decimal(1), 3: Decimal(50)})
        without = engine.compute_cost({1: Decimal(1)})
        assert with_legacy.internal_cost == without.internal_cost == Decimal("350000")
        assert with_legacy.total_units == Decimal(1)

    def test_unknown_role_ignored(self, engine):
        assert engine.compute_cost({42: Decimal(5)}).internal_cost == 0

    def test_empty_input_is_zero(self, engine):
        result = engine.compute_cost({})
        assert result.internal_cost == 0
        assert result.recommended_price == 0

    @pytest.mark.parametrize("role_id", [1, 2])
    def test_more_units_cost_more(self, engine, client_types, role_id):
        base = {1: Decimal(2), 2: Decimal(3)}
        bumped = {**base, role_id: base[role_id] + Decimal("0.5")}
        before = engine.compute_cost(base, client_type=client_types[0], margin_percentage=30)
        after = engine.compute_cost(bumped, client_type=client_types[0], margin_percentage=30)
        assert after.internal_cost > before.internal_cost
        assert after.cost_after_coefficient > before.cost_after_coefficient
        assert after.recommended_price > before.recommended_price

    def test_engine_only_prices_rates_it_was_built_with(self, rates):
        engine = PricingEngine([r for r in rates if r.role_name != "Dev"])
        assert engine.compute_cost({1: Decimal(10)}).internal_cost == 0
        assert [r.role_name for r in engine.active_rates] == ["Designer"]


class TestUnits:
    def test_derived_hourly_rate_rounds_half_up(self):
        assert derive_hourly_rate(Decimal("350000")) == Decimal("43750")
        assert derive_hourly_rate(Decimal("100004")) == Decimal("12501")
        assert derive_hourly_rate(Decimal("100003")) == Decimal("12500")

    @pytest.mark.parametrize(
        "daily,hourly",
        [(Decimal("3"), Decimal("0.38")), (Decimal("0.04"), Decimal("0.01")), (Decimal("0.01"), Decimal("0.01"))],
    )
    def test_small_daily_rate_keeps_positive_hourly(self, daily, hourly):
        assert derive_hourly_rate(daily) == hourly

    def test_to_days(self):
        assert to_days(Decimal(12), CalculationMode.HOURLY) == Decimal("1.5")
        assert to_days(Decimal(3), CalculationMode.DAILY) == Decimal(3)

    def test_round_trip_is_exact(self):
        original = {1: Decimal("1.3"), 2: Decimal("0.125"), 3: Decimal(0)}
        hours = convert_units(original, CalculationMode.DAILY, CalculationMode.HOURLY)
        assert hours == {1: Decimal("10.4"), 2: Decimal("1.000"), 3: Decimal(0)}
        assert convert_units(hours, CalculationMode.HOURLY, CalculationMode.DAILY) == original

    def test_same_mode_is_identity(self, engine):
        units = {1: Decimal(4)}
        assert engine.convert_units(units, CalculationMode.DAILY, CalculationMode.DAILY) == units

    def test_total_days_in_hourly_mode(self, engine):
        result = engine.compute_cost({1: Decimal(8), 2: Decimal(4)}, CalculationMode.HOURLY)
        assert engine.total_days(result, CalculationMode.HOURLY) == Decimal("1.5")


class TestWorkLineItems:
    def test_hourly_items_normalised_to_days(self, engine):
        items = engine.work_line_items({1: Decimal(80), 2: Decimal(0), 3: Decimal(8)}, CalculationMode.HOURLY)
        assert len(items) == 1
        item = items[0]
        assert item.role_name == "Dev"
        assert item.units_consumed == Decimal(10)
        assert item.unit_rate_used == Decimal("350000")
        assert item.line_cost == Decimal("3500000")

    def test_daily_items_keep_daily_rate(self, engine):
        items = engine.work_line_items({2: Decimal("2.5"), 1: Decimal(1)}, CalculationMode.DAILY)
        # catalog order, not input order
        assert [i.role_id for i in items] == [1, 2]
        assert sum(i.line_cost for i in items) == engine.compute_cost({2: Decimal("2.5"), 1: Decimal(1)}).internal_cost
