from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Sequence, Tuple

from core.exceptions import InvalidRequest, PricingConfigMissing

from ..dataclasses import EstimateLine, PackageLine, PricingSnapshot, QuoteEstimateResult, Route
from ..models import CargoType, Priority, TransportMode
from .utils import FOURPLACES, ONE, ZERO, d, q2, whole_number

logger = logging.getLogger(__name__)

RATE_SOURCE_ROUTE = "ROUTE"
RATE_SOURCE_DEFAULT = "DEFAULT"


def _table_value(table: Dict, key: str, table_name: str):
    try:
        return table[key]
    except KeyError:
        raise PricingConfigMissing(f"Pricing configuration has no {table_name} entry for {key}.")


def volumetric_weight(package: PackageLine, ratio: Decimal) -> Decimal:
    """Dimensional weight of one unit: L x W x H (cm) / ratio (cm3 per kg). Zero without full dimensions."""
    volume = package.volume_cm3()
    if volume <= ZERO or ratio <= ZERO:
        return ZERO
    return (volume / ratio).quantize(FOURPLACES)


def billable_weight(package: PackageLine, mode: str, snapshot: PricingSnapshot) -> Decimal:
    use_volumetric = bool(_table_value(snapshot.use_volumetric_weight_per_mode, mode, "use_volumetric_weight_per_mode"))
    if not use_volumetric:
        return package.weight
    ratio = _table_value(snapshot.volumetric_weight_ratios, mode, "volumetric_weight_ratios")
    return max(package.weight, volumetric_weight(package, ratio))


def resolve_rate(route: Route, mode: str, snapshot: PricingSnapshot) -> Tuple[Decimal, str]:
    """
    Per-kg rate for a route and mode.

    An active transport rate for the exact (origin, destination, mode) wins;
    otherwise the default rate scaled by the mode multiplier.
    """
    route_rate = snapshot.route_rates.get((route.origin_country, route.destination_country, mode))
    if route_rate is not None and route_rate.is_active:
        return route_rate.rate_per_kg, RATE_SOURCE_ROUTE
    multiplier = _table_value(snapshot.transport_multipliers, mode, "transport_multipliers")
    return snapshot.default_rate_per_kg * multiplier, RATE_SOURCE_DEFAULT


def price_line(package: PackageLine, route: Route, mode: str, snapshot: PricingSnapshot) -> EstimateLine:
    weight = billable_weight(package, mode, snapshot)
    rate, source = resolve_rate(route, mode, snapshot)
    base = weight * rate * package.quantity
    surcharge = _table_value(snapshot.cargo_type_surcharges, package.cargo_type, "cargo_type_surcharges")
    line_total = q2(max(ZERO, base * (ONE + surcharge)))
    unit_price = (line_total / package.quantity).quantize(FOURPLACES)
    return EstimateLine(
        description=package.description,
        quantity=package.quantity,
        cargo_type=package.cargo_type,
        weight=package.weight,
        billable_weight=weight,
        rate_per_kg=rate,
        rate_source=source,
        unit_price=unit_price,
        line_total=line_total,
    )


def dominant_cargo_type(packages: Sequence[PackageLine]) -> str:
    """Cargo type carrying the most actual weight; the earliest one wins a tie."""
    totals: Dict[str, Decimal] = {}
    for p in packages:
        totals[p.cargo_type] = totals.get(p.cargo_type, ZERO) + p.weight * p.quantity
    best, best_weight = None, None
    for cargo_type, weight in totals.items():
        if best_weight is None or weight > best_weight:
            best, best_weight = cargo_type, weight
    return best


def _positive_decimal(value, field: str, errors: Dict[str, str], allow_none: bool = False):
    if value is None:
        if not allow_none:
            errors[field] = "This field is required."
        return None
    try:
        parsed = d(value)
    except (InvalidOperation, ValueError, TypeError):
        errors[field] = "Must be a number."
        return None
    if not parsed.is_finite():
        errors[field] = "Must be a number."
        return None
    if not allow_none and parsed <= ZERO:
        errors[field] = "Must be greater than 0."
    return parsed


def normalize_packages(packages) -> List[PackageLine]:
    """Validate raw package dicts (or PackageLine objects) into PackageLine values."""
    if not packages:
        raise InvalidRequest({"packages": "At least one package is required."})

    errors: Dict[str, str] = {}
    normalized: List[PackageLine] = []
    for idx, raw in enumerate(packages):
        if isinstance(raw, PackageLine):
            raw = {
                "description": raw.description, "quantity": raw.quantity, "cargo_type": raw.cargo_type,
                "weight": raw.weight, "length": raw.length, "width": raw.width, "height": raw.height,
            }
        prefix = f"packages[{idx}]"

        try:
            quantity = whole_number(raw.get("quantity"))
        except ValueError:
            errors[f"{prefix}.quantity"] = "Must be a whole number."
            quantity = None
        if quantity is not None and quantity < 1:
            errors[f"{prefix}.quantity"] = "Must be at least 1."

        cargo_type = str(raw.get("cargo_type") or CargoType.GENERAL).upper()
        if cargo_type not in CargoType.values:
            errors[f"{prefix}.cargo_type"] = f"Unknown cargo type '{raw.get('cargo_type')}'."

        weight = _positive_decimal(raw.get("weight"), f"{prefix}.weight", errors)
        dims = {
            name: _positive_decimal(raw.get(name), f"{prefix}.{name}", errors, allow_none=True)
            for name in ("length", "width", "height")
        }

        normalized.append(
            PackageLine(
                quantity=quantity or 0,
                cargo_type=cargo_type,
                weight=weight if weight is not None else ZERO,
                description=str(raw.get("description") or ""),
                **dims,
            )
        )

    if errors:
        raise InvalidRequest(errors)
    return normalized


def normalize_modes(transport_modes) -> List[str]:
    if not transport_modes:
        raise InvalidRequest({"transport_modes": "Select at least one transport mode."})
    modes: List[str] = []
    for raw in transport_modes:
        mode = str(raw).upper()
        if mode not in TransportMode.values:
            raise InvalidRequest({"transport_modes": f"Unknown transport mode '{raw}'."})
        if mode not in modes:
            modes.append(mode)
    return modes


def normalize_route(route: Route) -> Route:
    errors = {}
    origin = (route.origin_country or "").strip().upper()
    destination = (route.destination_country or "").strip().upper()
    if not origin:
        errors["origin_country"] = "This field is required."
    if not destination:
        errors["destination_country"] = "This field is required."
    if errors:
        raise InvalidRequest(errors)
    return Route(origin, destination, route.origin_city or "", route.destination_city or "")


def estimate_multi_package(
    route: Route,
    packages,
    transport_modes,
    priority: str,
    snapshot: PricingSnapshot,
) -> QuoteEstimateResult:
    """
    Price an order of package lines against a pricing snapshot.

    Each line is rated with the first selected transport mode: billable
    weight x per-kg rate x quantity, then the cargo-type coefficient, clamped
    at zero. The priority coefficient is applied once, to the order total.
    Every other selected mode is priced the same way into `mode_totals` for
    comparison only. Delivery days follow the slowest selected mode.

    Pure function: all pricing data comes from `snapshot`.
    """
    route = normalize_route(route)
    modes = normalize_modes(transport_modes)
    priority = str(priority or "").upper()
    if priority not in Priority.values:
        raise InvalidRequest({"priority": f"Unknown priority '{priority}'."})
    lines_in = normalize_packages(packages)

    primary = modes[0]
    lines = [price_line(p, route, primary, snapshot) for p in lines_in]
    total_before_priority = sum((line.line_total for line in lines), ZERO)

    priority_surcharge = _table_value(snapshot.priority_surcharges, priority, "priority_surcharges")
    total_price = q2(total_before_priority * (ONE + priority_surcharge))

    mode_totals: Dict[str, Decimal] = {primary: total_before_priority}
    rate_sources: Dict[str, str] = {primary: resolve_rate(route, primary, snapshot)[1]}
    for mode in modes[1:]:
        mode_totals[mode] = sum((price_line(p, route, mode, snapshot).line_total for p in lines_in), ZERO)
        rate_sources[mode] = resolve_rate(route, mode, snapshot)[1]

    speeds = [_table_value(snapshot.delivery_speeds_per_mode, m, "delivery_speeds_per_mode") for m in modes]

    result = QuoteEstimateResult(
        lines=lines,
        total_weight=sum((p.weight * p.quantity for p in lines_in), ZERO),
        total_package_count=sum(p.quantity for p in lines_in),
        dominant_cargo_type=dominant_cargo_type(lines_in),
        total_before_priority=total_before_priority,
        priority=priority,
        priority_surcharge=priority_surcharge,
        total_price=total_price,
        estimated_delivery_days=max(s.max_days for s in speeds),
        estimated_delivery_days_min=max(s.min_days for s in speeds),
        primary_mode=primary,
        transport_modes=modes,
        mode_totals=mode_totals,
        rate_sources=rate_sources,
        currency=snapshot.currency,
        config_version=snapshot.version,
    )
    logger.debug(
        f"Estimated {route.origin_country}->{route.destination_country} via {'+'.join(modes)}: "
        f"{len(lines)} lines, total {result.total_price} {result.currency}"
    )
    return result
