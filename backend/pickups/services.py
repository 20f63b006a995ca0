"""
Pickup request lifecycle: REQUESTED -> SCHEDULED -> IN_PROGRESS -> COMPLETED,
with cancellation from any open state.
"""
from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from accounts.permissions import require_transition
from core.exceptions import InvalidRequest, require_min_length
from core.sequences import PICKUP_PREFIX, next_reference
from prospects.services import (
    find_by_tracking_token,
    get_or_create_prospect,
    guest_token_expiry,
    normalize_email,
    normalize_phone,
)

from .models import PickupLog, PickupRequest, PickupStatus, PickupTimeSlot
from .workflow import PICKUP_MACHINE

logger = logging.getLogger(__name__)

Event = PickupLog.Event


def _actor_name(actor) -> str:
    return getattr(actor, "username", None) or "guest"


def _log(pickup: PickupRequest, event: str, old_status, new_status, actor, notes: str = "", metadata=None) -> PickupLog:
    return PickupLog.objects.create(
        pickup=pickup,
        event_type=event,
        old_status=old_status,
        new_status=new_status,
        changed_by=actor,
        notes=notes or "",
        metadata=metadata or {},
    )


def _begin(pickup_id: int, action: str, actor):
    pickup = get_object_or_404(PickupRequest.objects.select_for_update(), pk=pickup_id)
    require_transition("pickup", action, actor, pickup)
    return pickup, PICKUP_MACHINE.resolve(pickup.status, action)


def _advance(pickup: PickupRequest, target: str, event: str, actor, notes: str = "", metadata=None, **changes):
    old_status = pickup.status
    pickup.status = target
    for name, value in changes.items():
        setattr(pickup, name, value)
    pickup.save()
    _log(pickup, event, old_status, target, actor, notes, metadata)
    logger.info(f"Pickup {pickup.tracking_number}: {old_status} -> {target} by {_actor_name(actor)}")
    return pickup


def _parse_time_slot(value) -> str:
    slot = str(value or PickupTimeSlot.FLEXIBLE).strip().upper()
    if slot not in PickupTimeSlot.values:
        raise InvalidRequest({"time_slot": f"Choose one of {', '.join(PickupTimeSlot.values)}."})
    return slot


def _check_not_past(field: str, value: datetime.date) -> None:
    if value < timezone.localdate():
        raise InvalidRequest({field: "Must not be in the past."})


@transaction.atomic
def create_pickup_request(data: Dict[str, Any], actor=None) -> PickupRequest:
    """
    File a pickup request.

    `actor` is None (or anonymous) for the public guest form: the contact
    email then becomes a Prospect and the request stays unattached until
    that person registers. Authenticated requests are attached right away.
    """
    data = dict(data)
    _check_not_past("requested_date", data["requested_date"])
    data["time_slot"] = _parse_time_slot(data.get("time_slot"))
    user = actor if getattr(actor, "is_authenticated", False) else None

    email = normalize_email(data.pop("contact_email", "") or (user.email if user else ""))
    phone = normalize_phone(data.pop("contact_phone", "") or (getattr(user, "phone", "") if user else ""))
    name = data.pop("contact_name", "") or (user.get_full_name() if user else "")

    pickup = PickupRequest(
        tracking_number=next_reference(PICKUP_PREFIX),
        token_expires_at=guest_token_expiry(),
        contact_email=email,
        contact_phone=phone,
        contact_name=name,
        **data,
    )
    if user is not None:
        pickup.created_by = user
        pickup.client_id = user.company_id
        pickup.is_attached_to_account = True
    else:
        if not phone:
            raise InvalidRequest({"contact_phone": "This field is required."})
        pickup.prospect = get_or_create_prospect(email, phone, name, data.get("company_name", ""))
    pickup.save()

    _log(pickup, Event.CREATED, None, PickupStatus.REQUESTED, user, metadata={"guest": user is None})
    logger.info(f"Pickup {pickup.tracking_number} requested by {_actor_name(user)} for {pickup.requested_date}")
    return pickup


@transaction.atomic
def schedule_pickup(
    pickup_id: int,
    actor,
    scheduled_date: datetime.date,
    time_slot=None,
    driver_name: str = "",
    driver_phone: str = "",
) -> PickupRequest:
    """Schedule a requested pickup, or move the slot of one already scheduled."""
    slot = _parse_time_slot(time_slot)
    _check_not_past("scheduled_date", scheduled_date)
    pickup, transition = _begin(pickup_id, "schedule", actor)
    changes = {
        "scheduled_date": scheduled_date,
        "time_slot": slot,
        "driver_name": driver_name or "",
        "driver_phone": driver_phone or "",
    }
    if transition is not None:
        return _advance(
            pickup, transition.target, Event.SCHEDULED, actor,
            metadata={"scheduled_date": str(scheduled_date), "time_slot": slot},
            **changes,
        )

    previous = {name: getattr(pickup, name) for name in changes}
    if previous == changes:
        return pickup
    for name, value in changes.items():
        setattr(pickup, name, value)
    pickup.save()
    _log(
        pickup, Event.RESCHEDULED, pickup.status, pickup.status, actor,
        metadata={
            "previous_date": str(previous["scheduled_date"]),
            "previous_time_slot": previous["time_slot"],
            "scheduled_date": str(scheduled_date),
            "time_slot": slot,
        },
    )
    logger.info(f"Pickup {pickup.tracking_number} rescheduled to {scheduled_date} {slot} by {_actor_name(actor)}")
    return pickup


@transaction.atomic
def start_pickup(pickup_id: int, actor) -> PickupRequest:
    pickup, transition = _begin(pickup_id, "start", actor)
    if transition is None:
        return pickup
    return _advance(pickup, transition.target, Event.STARTED, actor)


@transaction.atomic
def complete_pickup(pickup_id: int, actor, completion_notes: str = "") -> PickupRequest:
    pickup, transition = _begin(pickup_id, "complete", actor)
    if transition is None:
        return pickup
    return _advance(
        pickup, transition.target, Event.COMPLETED, actor, notes=completion_notes,
        completion_notes=completion_notes or "", actual_pickup_date=timezone.now(),
    )


@transaction.atomic
def cancel_pickup(pickup_id: int, actor, reason: str) -> PickupRequest:
    reason = require_min_length("reason", reason)
    pickup, transition = _begin(pickup_id, "cancel", actor)
    if transition is None:
        return pickup
    return _advance(pickup, transition.target, Event.CANCELLED, actor, notes=reason, cancellation_reason=reason)


def get_pickup_by_token(token: Optional[str]) -> PickupRequest:
    return find_by_tracking_token(PickupRequest.objects.select_related("client"), token)
