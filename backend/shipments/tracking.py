"""
Public, unauthenticated view of a shipment.

Only route, cargo summary, dates and a coarse event timeline are exposed.
Costs, internal notes, actor identities and coordinates never leave this
module. An unpublished shipment looks exactly like a missing one.
"""
from __future__ import annotations

import re
from typing import Dict, Optional

from .models import Shipment, ShipmentStatus

TRACKING_NUMBER_RE = re.compile(r"^SHP-\d{8}-[A-Z0-9]{5,}$")

UNPUBLISHED_STATUSES = frozenset({ShipmentStatus.DRAFT})

STATUS_LABELS: Dict[str, str] = {
    ShipmentStatus.DRAFT: "Draft",
    ShipmentStatus.PENDING_APPROVAL: "Awaiting approval",
    ShipmentStatus.APPROVED: "Approved",
    ShipmentStatus.PICKED_UP: "Picked up",
    ShipmentStatus.IN_TRANSIT: "In transit",
    ShipmentStatus.AT_CUSTOMS: "At customs",
    ShipmentStatus.CUSTOMS_CLEARED: "Customs cleared",
    ShipmentStatus.OUT_FOR_DELIVERY: "Out for delivery",
    ShipmentStatus.READY_FOR_PICKUP: "Ready for pickup",
    ShipmentStatus.DELIVERED: "Delivered",
    ShipmentStatus.CANCELLED: "Cancelled",
    ShipmentStatus.ON_HOLD: "On hold",
    ShipmentStatus.EXCEPTION: "Delivery issue",
}


def status_label(status: str) -> str:
    return STATUS_LABELS[ShipmentStatus(status)]


def is_valid_tracking_number(value) -> bool:
    return isinstance(value, str) and bool(TRACKING_NUMBER_RE.match(value))


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def to_public_view(shipment: Optional[Shipment]) -> Optional[dict]:
    if shipment is None or shipment.status in UNPUBLISHED_STATUSES:
        return None
    events = [
        {
            "status": e.status,
            "status_label": status_label(e.status),
            "location": e.location,
            "timestamp": _iso(e.timestamp),
        }
        for e in shipment.events.order_by("-timestamp", "-id")
    ]
    return {
        "tracking_number": shipment.tracking_number,
        "status": shipment.status,
        "status_label": status_label(shipment.status),
        "origin_city": shipment.origin_city,
        "origin_country": shipment.origin_country,
        "destination_city": shipment.destination_city,
        "destination_country": shipment.destination_country,
        "estimated_delivery_date": _iso(shipment.estimated_delivery_date),
        "actual_delivery_date": _iso(shipment.actual_delivery_date),
        "requested_pickup_date": _iso(shipment.requested_pickup_date),
        "actual_pickup_date": _iso(shipment.actual_pickup_date),
        "cargo_type": shipment.cargo_type,
        "weight": str(shipment.weight),
        "package_count": shipment.package_count,
        "transport_modes": list(shipment.transport_modes or []),
        "company_name": shipment.client.name if shipment.client_id else None,
        "events": events,
        "created_at": _iso(shipment.created_at),
        "updated_at": _iso(shipment.updated_at),
    }


def get_public_tracking(tracking_number: str) -> Optional[dict]:
    """None for malformed, unknown and unpublished tracking numbers alike."""
    number = (tracking_number or "").strip().upper() if isinstance(tracking_number, str) else None
    if not is_valid_tracking_number(number):
        return None
    shipment = (
        Shipment.objects.select_related("client")
        .filter(tracking_number=number)
        .exclude(status__in=UNPUBLISHED_STATUSES)
        .first()
    )
    return to_public_view(shipment)
