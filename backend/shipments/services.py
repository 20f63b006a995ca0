from __future__ import annotations

import datetime
import logging
from typing import Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from accounts.permissions import require_transition
from core.exceptions import InvalidRequest, StateConflict
from core.sequences import SHIPMENT_PREFIX, next_reference

from .models import Shipment, ShipmentStatus, TrackingEvent

logger = logging.getLogger(__name__)

CLOSED_STATUSES = frozenset({ShipmentStatus.DELIVERED, ShipmentStatus.CANCELLED})


def create_shipment_from_quote(quote, actor, package_count: int, cargo_description: str = "") -> Shipment:
    """
    Open the shipment for a validated quote.

    Must run inside the caller's transaction so a failure here leaves the
    quote untouched.
    """
    days = (quote.estimate_snapshot or {}).get("estimated_delivery_days")
    estimated_delivery = timezone.localdate() + datetime.timedelta(days=int(days)) if days else None

    shipment = Shipment.objects.create(
        tracking_number=next_reference(SHIPMENT_PREFIX),
        quote=quote,
        client=quote.client,
        status=ShipmentStatus.APPROVED,
        origin_country=quote.origin_country,
        origin_city=quote.origin_city,
        destination_country=quote.destination_country,
        destination_city=quote.destination_city,
        cargo_type=quote.cargo_type,
        cargo_description=cargo_description or "",
        weight=quote.total_weight,
        package_count=package_count,
        transport_modes=list(quote.transport_modes),
        estimated_cost=quote.estimated_cost,
        currency=quote.currency,
        estimated_delivery_date=estimated_delivery,
        created_by=actor,
    )
    TrackingEvent.objects.create(
        shipment=shipment,
        status=ShipmentStatus.APPROVED,
        location=quote.origin_city or quote.origin_country,
        description="Shipment registered",
        recorded_by=actor,
        timestamp=timezone.now(),
    )
    logger.info(f"Shipment {shipment.tracking_number} created from quote {quote.quote_number}")
    return shipment


@transaction.atomic
def record_tracking_event(
    shipment_id: int,
    actor,
    status: str,
    location: str,
    description: str = "",
    internal_notes: str = "",
    latitude=None,
    longitude=None,
    timestamp: Optional[datetime.datetime] = None,
) -> TrackingEvent:
    shipment = get_object_or_404(Shipment.objects.select_for_update(), pk=shipment_id)
    require_transition("shipment", "record_event", actor, shipment)

    if status not in ShipmentStatus.values or status == ShipmentStatus.DRAFT:
        raise InvalidRequest({"status": f"'{status}' is not a valid tracking status."})
    if not (location or "").strip():
        raise InvalidRequest({"location": "This field is required."})
    if shipment.status in CLOSED_STATUSES:
        raise StateConflict(shipment.status, "record_event", f"Shipment is {shipment.status}.")

    when = timestamp or timezone.now()
    event = TrackingEvent.objects.create(
        shipment=shipment,
        status=status,
        location=location.strip(),
        latitude=latitude,
        longitude=longitude,
        description=description or "",
        internal_notes=internal_notes or "",
        recorded_by=actor,
        timestamp=when,
    )

    old_status = shipment.status
    shipment.status = status
    fields = ["status", "updated_at"]
    if status == ShipmentStatus.PICKED_UP and shipment.actual_pickup_date is None:
        shipment.actual_pickup_date = when
        fields.append("actual_pickup_date")
    if status == ShipmentStatus.DELIVERED:
        shipment.actual_delivery_date = when
        fields.append("actual_delivery_date")
    shipment.save(update_fields=fields)

    logger.info(f"Shipment {shipment.tracking_number}: {old_status} -> {status} at {event.location} by {actor.username}")
    return event
