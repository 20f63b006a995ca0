"""
Pricing configuration: loading, validation and administrative updates.

The live configuration is a single PricingConfig row. The pricing engine
never reads it directly; callers turn it into a PricingSnapshot first, so an
estimate is always computed against one consistent copy of the tables.
"""
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from django.conf import settings
from django.db import transaction

from accounts.permissions import require_transition
from core.exceptions import InvalidRequest, PricingConfigMissing

from ..dataclasses import DeliverySpeed, PricingSnapshot, RouteRate
from ..models import CargoType, PricingConfig, Priority, TransportMode, TransportRate
from .utils import d

logger = logging.getLogger(__name__)

MULTIPLIER_RANGE = (Decimal("0.1"), Decimal("10"))
SURCHARGE_RANGE = (Decimal("-1"), Decimal("5"))
DELIVERY_DAYS_RANGE = (1, 365)

DEFAULT_CONFIG: Dict[str, Any] = {
    "default_rate_per_kg": "0.50",
    "default_rate_per_m3": "75.00",
    "volumetric_weight_ratios": {"AIR": "6000", "ROAD": "3000", "SEA": "1000", "RAIL": "4000"},
    "use_volumetric_weight_per_mode": {"AIR": True, "ROAD": True, "SEA": False, "RAIL": True},
    "transport_multipliers": {"ROAD": "1.0", "SEA": "0.6", "AIR": "3.0", "RAIL": "0.8"},
    "cargo_type_surcharges": {
        "GENERAL": "0",
        "DANGEROUS": "0.5",
        "PERISHABLE": "0.4",
        "FRAGILE": "0.3",
        "BULK": "-0.1",
        "CONTAINER": "0.2",
        "PALLETIZED": "0.15",
        "OTHER": "0.1",
    },
    "priority_surcharges": {"STANDARD": "0", "NORMAL": "0.1", "EXPRESS": "0.5", "URGENT": "1.0"},
    "delivery_speeds_per_mode": {
        "ROAD": {"min": 3, "max": 7},
        "SEA": {"min": 20, "max": 45},
        "AIR": {"min": 1, "max": 3},
        "RAIL": {"min": 7, "max": 14},
    },
}

CONFIG_FIELDS = tuple(DEFAULT_CONFIG.keys())


def get_active_config() -> PricingConfig:
    config = PricingConfig.objects.filter(pk=PricingConfig.SINGLETON_ID).first()
    if config is None:
        logger.error("No pricing configuration found; run `manage.py seed_pricing_config`")
        raise PricingConfigMissing()
    return config


# ---- Validation ----

def _decimal(value, path: str, errors: Dict[str, str]) -> Optional[Decimal]:
    if isinstance(value, bool):
        errors[path] = "Must be a number."
        return None
    try:
        parsed = d(value)
    except (InvalidOperation, ValueError, TypeError):
        errors[path] = "Must be a number."
        return None
    if not parsed.is_finite():
        errors[path] = "Must be a number."
        return None
    return parsed


def _check_keys(name: str, value, members: Iterable[str], errors: Dict[str, str]) -> bool:
    if not isinstance(value, dict):
        errors[name] = "Must be an object keyed by enum value."
        return False
    members = list(members)
    missing = [m for m in members if m not in value]
    unknown = [k for k in value if k not in members]
    if missing:
        errors[name] = f"Missing entries for: {', '.join(missing)}."
        return False
    if unknown:
        errors[name] = f"Unknown keys: {', '.join(sorted(unknown))}."
        return False
    return True


def _decimal_map(name, value, members, errors, low=None, high=None, positive=False) -> Dict[str, str]:
    if not _check_keys(name, value, members, errors):
        return {}
    out = {}
    for key in members:
        path = f"{name}.{key}"
        parsed = _decimal(value[key], path, errors)
        if parsed is None:
            continue
        if positive and parsed <= 0:
            errors[path] = "Must be greater than 0."
        elif low is not None and not (low <= parsed <= high):
            errors[path] = f"Must be between {low} and {high}."
        out[key] = str(parsed)
    return out


def validate_config_payload(data: Dict[str, Any], partial: bool = True) -> Dict[str, Any]:
    """
    Validate and normalize a configuration payload.

    Every map must cover each member of its enum exactly. With
    partial=False all fields are required (first-time creation).
    """
    errors: Dict[str, str] = {}
    clean: Dict[str, Any] = {}

    unknown = [k for k in data if k not in CONFIG_FIELDS]
    if unknown:
        errors["non_field_errors"] = f"Unknown fields: {', '.join(sorted(unknown))}."
    if not partial:
        for name in CONFIG_FIELDS:
            if name not in data:
                errors[name] = "This field is required."

    modes = TransportMode.values
    for name in ("default_rate_per_kg", "default_rate_per_m3"):
        if name in data:
            parsed = _decimal(data[name], name, errors)
            if parsed is not None:
                if parsed < 0:
                    errors[name] = "Must not be negative."
                clean[name] = parsed

    if "volumetric_weight_ratios" in data:
        clean["volumetric_weight_ratios"] = _decimal_map(
            "volumetric_weight_ratios", data["volumetric_weight_ratios"], modes, errors, positive=True
        )
    if "transport_multipliers" in data:
        clean["transport_multipliers"] = _decimal_map(
            "transport_multipliers", data["transport_multipliers"], modes, errors, *MULTIPLIER_RANGE
        )
    if "cargo_type_surcharges" in data:
        clean["cargo_type_surcharges"] = _decimal_map(
            "cargo_type_surcharges", data["cargo_type_surcharges"], CargoType.values, errors, *SURCHARGE_RANGE
        )
    if "priority_surcharges" in data:
        clean["priority_surcharges"] = _decimal_map(
            "priority_surcharges", data["priority_surcharges"], Priority.values, errors, *SURCHARGE_RANGE
        )

    if "use_volumetric_weight_per_mode" in data:
        value = data["use_volumetric_weight_per_mode"]
        if _check_keys("use_volumetric_weight_per_mode", value, modes, errors):
            bad = [m for m in modes if not isinstance(value[m], bool)]
            if bad:
                errors["use_volumetric_weight_per_mode"] = f"Must be true or false for: {', '.join(bad)}."
            else:
                clean["use_volumetric_weight_per_mode"] = {m: value[m] for m in modes}

    if "delivery_speeds_per_mode" in data:
        value = data["delivery_speeds_per_mode"]
        if _check_keys("delivery_speeds_per_mode", value, modes, errors):
            speeds = {}
            low, high = DELIVERY_DAYS_RANGE
            for m in modes:
                path = f"delivery_speeds_per_mode.{m}"
                entry = value[m]
                if not isinstance(entry, dict):
                    errors[path] = "Must be an object with min and max."
                    continue
                lo, hi = entry.get("min"), entry.get("max")
                if not all(isinstance(v, int) and not isinstance(v, bool) for v in (lo, hi)):
                    errors[path] = "min and max must be whole numbers of days."
                elif not (low <= lo <= high and low <= hi <= high):
                    errors[path] = f"Days must be between {low} and {high}."
                elif hi < lo:
                    errors[path] = "max must be greater than or equal to min."
                else:
                    speeds[m] = {"min": lo, "max": hi}
            clean["delivery_speeds_per_mode"] = speeds

    if errors:
        raise InvalidRequest(errors)
    return clean


@transaction.atomic
def update_pricing_config(data: Dict[str, Any], actor) -> PricingConfig:
    """
    Replace the supplied configuration fields in one transaction.

    Fields not present in `data` keep their current value; a supplied map
    replaces the stored map entirely. The first update creates the
    configuration and must supply every field.
    """
    require_transition("pricing_config", "update", actor)
    config = PricingConfig.objects.select_for_update().filter(pk=PricingConfig.SINGLETON_ID).first()
    clean = validate_config_payload(data, partial=config is not None)

    if config is None:
        config = PricingConfig(**clean, version=1, updated_by=actor)
        config.save()
        logger.info(f"Pricing configuration created by {actor.username}")
        return config

    for name, value in clean.items():
        setattr(config, name, value)
    config.version += 1
    config.updated_by = actor
    config.save()
    logger.info(f"Pricing configuration updated to v{config.version} by {actor.username}: {', '.join(sorted(clean))}")
    return config


# ---- Snapshots ----

def build_snapshot(config: PricingConfig, rates: Iterable[TransportRate] = ()) -> PricingSnapshot:
    return PricingSnapshot(
        default_rate_per_kg=d(config.default_rate_per_kg),
        default_rate_per_m3=d(config.default_rate_per_m3),
        volumetric_weight_ratios={k: d(v) for k, v in config.volumetric_weight_ratios.items()},
        use_volumetric_weight_per_mode={k: bool(v) for k, v in config.use_volumetric_weight_per_mode.items()},
        transport_multipliers={k: d(v) for k, v in config.transport_multipliers.items()},
        cargo_type_surcharges={k: d(v) for k, v in config.cargo_type_surcharges.items()},
        priority_surcharges={k: d(v) for k, v in config.priority_surcharges.items()},
        delivery_speeds_per_mode={
            k: DeliverySpeed(min_days=int(v["min"]), max_days=int(v["max"]))
            for k, v in config.delivery_speeds_per_mode.items()
        },
        route_rates={
            (r.origin_country, r.destination_country, r.transport_mode): RouteRate(
                rate_per_kg=d(r.rate_per_kg),
                rate_per_m3=None if r.rate_per_m3 is None else d(r.rate_per_m3),
                is_active=r.is_active,
            )
            for r in rates
        },
        version=config.version,
        currency=settings.FREIGHTDESK["DEFAULT_CURRENCY"],
    )


def load_snapshot(origin_country: str, destination_country: str) -> PricingSnapshot:
    config = get_active_config()
    rates = TransportRate.objects.filter(
        origin_country=(origin_country or "").upper(),
        destination_country=(destination_country or "").upper(),
        is_active=True,
    )
    return build_snapshot(config, rates)
