from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .services.utils import ZERO


@dataclass(frozen=True)
class Route:
    origin_country: str
    destination_country: str
    origin_city: str = ""
    destination_city: str = ""


@dataclass
class PackageLine:
    quantity: int
    cargo_type: str
    weight: Decimal  # kg, per unit
    description: str = ""
    length: Optional[Decimal] = None  # cm, per unit
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None

    def volume_cm3(self) -> Decimal:
        dims = (self.length, self.width, self.height)
        if any(v is None or v <= ZERO for v in dims):
            return ZERO
        return self.length * self.width * self.height

    def to_dict(self) -> Dict:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "cargo_type": self.cargo_type,
            "weight": str(self.weight),
            "length": None if self.length is None else str(self.length),
            "width": None if self.width is None else str(self.width),
            "height": None if self.height is None else str(self.height),
        }


@dataclass(frozen=True)
class DeliverySpeed:
    min_days: int
    max_days: int


@dataclass(frozen=True)
class RouteRate:
    rate_per_kg: Decimal
    rate_per_m3: Optional[Decimal] = None
    is_active: bool = True


@dataclass(frozen=True)
class PricingSnapshot:
    """Immutable copy of the pricing tables an estimate is computed against."""
    default_rate_per_kg: Decimal
    default_rate_per_m3: Decimal
    volumetric_weight_ratios: Dict[str, Decimal]
    use_volumetric_weight_per_mode: Dict[str, bool]
    transport_multipliers: Dict[str, Decimal]
    cargo_type_surcharges: Dict[str, Decimal]
    priority_surcharges: Dict[str, Decimal]
    delivery_speeds_per_mode: Dict[str, DeliverySpeed]
    # (origin_country, destination_country, mode) -> rate
    route_rates: Dict[Tuple[str, str, str], RouteRate] = field(default_factory=dict)
    version: int = 0
    currency: str = "EUR"


@dataclass
class EstimateLine:
    description: str
    quantity: int
    cargo_type: str
    weight: Decimal
    billable_weight: Decimal
    rate_per_kg: Decimal
    rate_source: str
    unit_price: Decimal
    line_total: Decimal

    def to_dict(self) -> Dict:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "cargo_type": self.cargo_type,
            "weight": str(self.weight),
            "billable_weight": str(self.billable_weight),
            "rate_per_kg": str(self.rate_per_kg),
            "rate_source": self.rate_source,
            "unit_price": str(self.unit_price),
            "line_total": str(self.line_total),
        }


@dataclass
class QuoteEstimateResult:
    lines: List[EstimateLine]
    total_weight: Decimal
    total_package_count: int
    dominant_cargo_type: str
    total_before_priority: Decimal
    priority: str
    priority_surcharge: Decimal
    total_price: Decimal
    estimated_delivery_days: int
    estimated_delivery_days_min: int
    primary_mode: str
    transport_modes: List[str]
    mode_totals: Dict[str, Decimal] = field(default_factory=dict)
    rate_sources: Dict[str, str] = field(default_factory=dict)
    currency: str = "EUR"
    config_version: int = 0

    def to_dict(self) -> Dict:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "total_weight": str(self.total_weight),
            "total_package_count": self.total_package_count,
            "dominant_cargo_type": self.dominant_cargo_type,
            "total_before_priority": str(self.total_before_priority),
            "priority": self.priority,
            "priority_surcharge": str(self.priority_surcharge),
            "total_price": str(self.total_price),
            "estimated_delivery_days": self.estimated_delivery_days,
            "estimated_delivery_days_min": self.estimated_delivery_days_min,
            "primary_mode": self.primary_mode,
            "transport_modes": list(self.transport_modes),
            "mode_totals": {mode: str(total) for mode, total in self.mode_totals.items()},
            "rate_sources": dict(self.rate_sources),
            "currency": self.currency,
            "config_version": self.config_version,
        }
