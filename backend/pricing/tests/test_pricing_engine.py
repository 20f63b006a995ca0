"""
Unit tests for the multi-package pricing engine.

The engine is pure, so these tests build PricingSnapshot values by hand and
never touch the database.
"""

from decimal import Decimal

import pytest

from core.exceptions import InvalidRequest, PricingConfigMissing

from ..dataclasses import DeliverySpeed, PackageLine, PricingSnapshot, Route, RouteRate
from ..services.pricing_service import (
    billable_weight,
    dominant_cargo_type,
    estimate_multi_package,
    resolve_rate,
    volumetric_weight,
)

FR_BF = Route("FR", "BF")


def _snapshot(**overrides) -> PricingSnapshot:
    values = dict(
        default_rate_per_kg=Decimal("1.0"),
        default_rate_per_m3=Decimal("100"),
        volumetric_weight_ratios={"AIR": Decimal("6000"), "ROAD": Decimal("3000"), "SEA": Decimal("1000"), "RAIL": Decimal("4000")},
        use_volumetric_weight_per_mode={"AIR": True, "ROAD": True, "SEA": False, "RAIL": True},
        transport_multipliers={"ROAD": Decimal("1.0"), "SEA": Decimal("0.6"), "AIR": Decimal("3.0"), "RAIL": Decimal("0.8")},
        cargo_type_surcharges={
            "GENERAL": Decimal("0"), "DANGEROUS": Decimal("0.5"), "PERISHABLE": Decimal("0.4"),
            "FRAGILE": Decimal("0.3"), "BULK": Decimal("-0.1"), "CONTAINER": Decimal("0.2"),
            "PALLETIZED": Decimal("0.15"), "OTHER": Decimal("0.1"),
        },
        priority_surcharges={"STANDARD": Decimal("0"), "NORMAL": Decimal("0.1"), "EXPRESS": Decimal("0.5"), "URGENT": Decimal("1.0")},
        delivery_speeds_per_mode={
            "ROAD": DeliverySpeed(3, 7), "SEA": DeliverySpeed(20, 45),
            "AIR": DeliverySpeed(1, 3), "RAIL": DeliverySpeed(7, 14),
        },
    )
    values.update(overrides)
    return PricingSnapshot(**values)


def _pkg(quantity=2, weight="10", cargo_type="GENERAL", **dims):
    return {"quantity": quantity, "weight": Decimal(weight), "cargo_type": cargo_type, **dims}


class TestReferenceScenarios:
    """Worked examples for a FR -> BF road order with no route rate"""

    def test_general_standard(self):
        result = estimate_multi_package(FR_BF, [_pkg()], ["ROAD"], "STANDARD", _snapshot())
        assert result.lines[0].line_total == Decimal("20.00")
        assert result.total_before_priority == Decimal("20.00")
        assert result.total_price == Decimal("20.00")

    def test_express_priority_applied_to_total(self):
        result = estimate_multi_package(FR_BF, [_pkg()], ["ROAD"], "EXPRESS", _snapshot())
        assert result.total_before_priority == Decimal("20.00")
        assert result.total_price == Decimal("30.00")

    def test_dangerous_cargo_surcharge(self):
        result = estimate_multi_package(FR_BF, [_pkg(cargo_type="DANGEROUS")], ["ROAD"], "STANDARD", _snapshot())
        assert result.lines[0].line_total == Decimal("30.00")

    def test_unit_price_is_line_total_over_quantity(self):
        result = estimate_multi_package(FR_BF, [_pkg(quantity=3, weight="7")], ["ROAD"], "STANDARD", _snapshot())
        line = result.lines[0]
        assert line.line_total == Decimal("21.00")
        assert line.unit_price == Decimal("7.0000")


class TestOrderAggregation:
    """Totals, priority and summary fields across several lines"""

    def test_total_is_sum_of_lines_and_priority_applied_once(self):
        packages = [_pkg(quantity=1, weight="12.5"), _pkg(quantity=4, weight="3", cargo_type="FRAGILE"), _pkg(quantity=2, weight="40", cargo_type="BULK")]
        result = estimate_multi_package(FR_BF, packages, ["ROAD"], "URGENT", _snapshot())

        assert result.total_before_priority == sum(line.line_total for line in result.lines)
        assert result.total_price == (result.total_before_priority * Decimal("2")).quantize(Decimal("0.01"))
        assert result.total_weight == Decimal("104.5")
        assert result.total_package_count == 7

    def test_dominant_cargo_type_by_aggregate_weight(self):
        packages = [_pkg(quantity=1, weight="30", cargo_type="FRAGILE"), _pkg(quantity=4, weight="10", cargo_type="GENERAL")]
        result = estimate_multi_package(FR_BF, packages, ["ROAD"], "STANDARD", _snapshot())
        assert result.dominant_cargo_type == "GENERAL"

    def test_dominant_cargo_type_tie_goes_to_first(self):
        packages = [
            PackageLine(quantity=1, cargo_type="PERISHABLE", weight=Decimal("20")),
            PackageLine(quantity=2, cargo_type="GENERAL", weight=Decimal("10")),
        ]
        assert dominant_cargo_type(packages) == "PERISHABLE"

    def test_negative_surcharge_never_below_zero(self):
        snapshot = _snapshot(cargo_type_surcharges={**_snapshot().cargo_type_surcharges, "BULK": Decimal("-1")})
        result = estimate_multi_package(FR_BF, [_pkg(cargo_type="BULK")], ["ROAD"], "STANDARD", snapshot)
        assert result.lines[0].line_total == Decimal("0.00")
        assert result.total_price == Decimal("0.00")

    def test_bulk_discount(self):
        result = estimate_multi_package(FR_BF, [_pkg(cargo_type="BULK")], ["ROAD"], "STANDARD", _snapshot())
        assert result.lines[0].line_total == Decimal("18.00")


class TestVolumetricWeight:
    """Billable weight per mode"""

    def test_volumetric_wins_when_heavier_and_enabled(self):
        # 50 x 40 x 30 cm = 60000 cm3 / 3000 = 20 kg volumetric vs 10 kg actual
        pkg = PackageLine(quantity=1, cargo_type="GENERAL", weight=Decimal("10"), length=Decimal("50"), width=Decimal("40"), height=Decimal("30"))
        assert volumetric_weight(pkg, Decimal("3000")) == Decimal("20")
        assert billable_weight(pkg, "ROAD", _snapshot()) == Decimal("20")

    def test_sea_bills_actual_weight_regardless_of_dimensions(self):
        pkg = PackageLine(quantity=1, cargo_type="GENERAL", weight=Decimal("10"), length=Decimal("200"), width=Decimal("200"), height=Decimal("200"))
        assert billable_weight(pkg, "SEA", _snapshot()) == Decimal("10")

    def test_actual_weight_wins_when_heavier(self):
        pkg = PackageLine(quantity=1, cargo_type="GENERAL", weight=Decimal("50"), length=Decimal("10"), width=Decimal("10"), height=Decimal("10"))
        assert billable_weight(pkg, "AIR", _snapshot()) == Decimal("50")

    def test_missing_or_zero_dimension_means_no_volumetric(self):
        partial = PackageLine(quantity=1, cargo_type="GENERAL", weight=Decimal("1"), length=Decimal("100"), width=Decimal("100"))
        zero = PackageLine(quantity=1, cargo_type="GENERAL", weight=Decimal("1"), length=Decimal("100"), width=Decimal("100"), height=Decimal("0"))
        assert volumetric_weight(partial, Decimal("6000")) == Decimal("0")
        assert billable_weight(zero, "AIR", _snapshot()) == Decimal("1")

    def test_quantity_multiplies_volumetric_unit_cost(self):
        pkg = _pkg(quantity=3, weight="10", length=Decimal("50"), width=Decimal("40"), height=Decimal("30"))
        result = estimate_multi_package(FR_BF, [pkg], ["ROAD"], "STANDARD", _snapshot())
        assert result.lines[0].billable_weight == Decimal("20")
        assert result.lines[0].line_total == Decimal("60.00")


class TestRates:
    """Route rate lookup and fallback"""

    def test_default_rate_times_multiplier(self):
        rate, source = resolve_rate(FR_BF, "AIR", _snapshot())
        assert rate == Decimal("3.0")
        assert source == "DEFAULT"

    def test_active_route_rate_wins(self):
        snapshot = _snapshot(route_rates={("FR", "BF", "ROAD"): RouteRate(rate_per_kg=Decimal("2.5"))})
        result = estimate_multi_package(FR_BF, [_pkg()], ["ROAD"], "STANDARD", snapshot)
        assert result.lines[0].line_total == Decimal("50.00")
        assert result.rate_sources == {"ROAD": "ROUTE"}

    def test_inactive_route_rate_falls_back(self):
        snapshot = _snapshot(route_rates={("FR", "BF", "ROAD"): RouteRate(rate_per_kg=Decimal("2.5"), is_active=False)})
        rate, source = resolve_rate(FR_BF, "ROAD", snapshot)
        assert (rate, source) == (Decimal("1.0"), "DEFAULT")

    def test_route_rate_is_directional(self):
        snapshot = _snapshot(route_rates={("BF", "FR", "ROAD"): RouteRate(rate_per_kg=Decimal("9"))})
        _, source = resolve_rate(FR_BF, "ROAD", snapshot)
        assert source == "DEFAULT"


class TestMultiMode:
    """First selected mode rates the lines; the others are informational"""

    def test_first_mode_is_authoritative(self):
        result = estimate_multi_package(FR_BF, [_pkg()], ["AIR", "ROAD"], "STANDARD", _snapshot())
        assert result.primary_mode == "AIR"
        assert result.total_before_priority == Decimal("60.00")
        assert result.mode_totals == {"AIR": Decimal("60.00"), "ROAD": Decimal("20.00")}

    def test_delivery_days_use_slowest_mode(self):
        result = estimate_multi_package(FR_BF, [_pkg()], ["AIR", "SEA"], "STANDARD", _snapshot())
        assert result.estimated_delivery_days == 45
        assert result.estimated_delivery_days_min == 20

    def test_duplicate_modes_collapsed(self):
        result = estimate_multi_package(FR_BF, [_pkg()], ["ROAD", "road"], "STANDARD", _snapshot())
        assert result.transport_modes == ["ROAD"]


class TestValidation:
    """Rejected inputs never price"""

    def test_empty_packages(self):
        with pytest.raises(InvalidRequest) as exc:
            estimate_multi_package(FR_BF, [], ["ROAD"], "STANDARD", _snapshot())
        assert "packages" in exc.value.errors

    def test_zero_quantity(self):
        with pytest.raises(InvalidRequest) as exc:
            estimate_multi_package(FR_BF, [_pkg(quantity=0)], ["ROAD"], "STANDARD", _snapshot())
        assert "packages[0].quantity" in exc.value.errors

    def test_fractional_quantity(self):
        for bad in (2.5, Decimal("1.2"), "two", True, None):
            with pytest.raises(InvalidRequest) as exc:
                estimate_multi_package(FR_BF, [_pkg(quantity=bad)], ["ROAD"], "STANDARD", _snapshot())
            assert exc.value.errors["packages[0].quantity"] == "Must be a whole number."

    def test_integral_quantity_in_any_numeric_form(self):
        expected = estimate_multi_package(FR_BF, [_pkg(quantity=2)], ["ROAD"], "STANDARD", _snapshot())
        for same in (2.0, Decimal("2.00"), "2"):
            result = estimate_multi_package(FR_BF, [_pkg(quantity=same)], ["ROAD"], "STANDARD", _snapshot())
            assert result.total_price == expected.total_price
            assert result.total_package_count == 2

    def test_non_positive_weight(self):
        with pytest.raises(InvalidRequest) as exc:
            estimate_multi_package(FR_BF, [_pkg(), _pkg(weight="-1")], ["ROAD"], "STANDARD", _snapshot())
        assert "packages[1].weight" in exc.value.errors

    def test_no_transport_mode(self):
        with pytest.raises(InvalidRequest) as exc:
            estimate_multi_package(FR_BF, [_pkg()], [], "STANDARD", _snapshot())
        assert "transport_modes" in exc.value.errors

    def test_unknown_priority(self):
        with pytest.raises(InvalidRequest):
            estimate_multi_package(FR_BF, [_pkg()], ["ROAD"], "WHENEVER", _snapshot())

    def test_unknown_cargo_type(self):
        with pytest.raises(InvalidRequest) as exc:
            estimate_multi_package(FR_BF, [_pkg(cargo_type="LIVESTOCK")], ["ROAD"], "STANDARD", _snapshot())
        assert "packages[0].cargo_type" in exc.value.errors

    def test_incomplete_snapshot_is_a_configuration_error(self):
        snapshot = _snapshot(transport_multipliers={"ROAD": Decimal("1.0")})
        with pytest.raises(PricingConfigMissing):
            estimate_multi_package(FR_BF, [_pkg()], ["AIR"], "STANDARD", snapshot)


def test_estimate_is_deterministic():
    packages = [_pkg(quantity=2, weight="13.37", cargo_type="PERISHABLE"), _pkg(quantity=1, weight="5", length=Decimal("60"), width=Decimal("60"), height=Decimal("60"))]
    first = estimate_multi_package(FR_BF, packages, ["RAIL", "AIR"], "NORMAL", _snapshot())
    second = estimate_multi_package(FR_BF, packages, ["RAIL", "AIR"], "NORMAL", _snapshot())
    assert first.to_dict() == second.to_dict()
