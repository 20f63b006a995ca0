"""
Delegated purchase lifecycle: REQUESTED -> IN_TREATMENT -> DELIVERED, with
cancellation from any open state. Costs may be revised by operations at any
point before cancellation; the total is only known once product, delivery
and fee are all set.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from accounts.permissions import require_transition
from core.exceptions import InvalidRequest, StateConflict, require_min_length
from core.sequences import PURCHASE_PREFIX, next_reference
from pricing.services.utils import ZERO, calculate_purchase_service_fee, calculate_purchase_total, q2
from prospects.services import (
    find_by_tracking_token,
    get_or_create_prospect,
    guest_token_expiry,
    normalize_email,
    normalize_phone,
)

from .models import PurchaseLog, PurchaseRequest, PurchaseStatus
from .workflow import PURCHASE_MACHINE

logger = logging.getLogger(__name__)

Event = PurchaseLog.Event

COST_FIELDS = ("actual_product_cost", "delivery_cost", "service_fee")


def _actor_name(actor) -> str:
    return getattr(actor, "username", None) or "guest"


def _log(purchase, event: str, old_status, new_status, actor, notes: str = "", metadata=None) -> PurchaseLog:
    return PurchaseLog.objects.create(
        purchase=purchase,
        event_type=event,
        old_status=old_status,
        new_status=new_status,
        changed_by=actor,
        notes=notes or "",
        metadata=metadata or {},
    )


def _lock(purchase_id: int) -> PurchaseRequest:
    return get_object_or_404(PurchaseRequest.objects.select_for_update(), pk=purchase_id)


def _begin(purchase_id: int, action: str, actor):
    purchase = _lock(purchase_id)
    require_transition("purchase", action, actor, purchase)
    return purchase, PURCHASE_MACHINE.resolve(purchase.status, action)


def _advance(purchase, target: str, event: str, actor, notes: str = "", metadata=None, **changes):
    old_status = purchase.status
    purchase.status = target
    for name, value in changes.items():
        setattr(purchase, name, value)
    purchase.save()
    _log(purchase, event, old_status, target, actor, notes, metadata)
    logger.info(f"Purchase {purchase.tracking_number}: {old_status} -> {target} by {_actor_name(actor)}")
    return purchase


def _money(field: str, value) -> Optional[Decimal]:
    if value is None:
        return None
    amount = q2(value)
    if amount < ZERO:
        raise InvalidRequest({field: "Must not be negative."})
    return amount


def service_fee_for(product_cost) -> Optional[Decimal]:
    """Default fee on a product cost, or None while the cost is unknown."""
    if product_cost is None:
        return None
    return calculate_purchase_service_fee(
        product_cost,
        settings.FREIGHTDESK["PURCHASE_SERVICE_FEE_RATE"],
        settings.FREIGHTDESK["PURCHASE_SERVICE_FEE_MIN"],
    )


def _apply_costs(purchase: PurchaseRequest, costs: Dict[str, Any]) -> Dict[str, Dict[str, Optional[str]]]:
    """
    Set the supplied costs and recompute the total. A fee given explicitly is
    kept until another one is given; otherwise the fee follows the current
    product cost. Returns {field: {"old", "new"}} for every value that changed.
    """
    before = {name: getattr(purchase, name) for name in COST_FIELDS + ("service_fee_is_manual", "total_cost")}
    for name in COST_FIELDS:
        if costs.get(name) is not None:
            setattr(purchase, name, _money(name, costs[name]))
    if costs.get("service_fee") is not None:
        purchase.service_fee_is_manual = True
    elif not purchase.service_fee_is_manual:
        purchase.service_fee = service_fee_for(purchase.actual_product_cost)
    purchase.total_cost = calculate_purchase_total(
        purchase.actual_product_cost, purchase.delivery_cost, purchase.service_fee
    )
    if not purchase.currency:
        purchase.currency = settings.FREIGHTDESK["DEFAULT_CURRENCY"]

    changed = {}
    for name, old in before.items():
        new = getattr(purchase, name)
        if old != new:
            changed[name] = {"old": None if old is None else str(old), "new": None if new is None else str(new)}
    return changed


@transaction.atomic
def create_purchase_request(data: Dict[str, Any], actor=None) -> PurchaseRequest:
    """File a delegated purchase, as a guest (`actor` None) or for a signed-in user."""
    data = dict(data)
    user = actor if getattr(actor, "is_authenticated", False) else None

    email = normalize_email(data.pop("contact_email", "") or (user.email if user else ""))
    phone = normalize_phone(data.pop("contact_phone", "") or (getattr(user, "phone", "") if user else ""))
    name = data.pop("contact_name", "") or (user.get_full_name() if user else "")

    estimated, budget = data.get("estimated_price"), data.get("max_budget")
    if estimated is not None and budget is not None and budget < estimated:
        raise InvalidRequest({"max_budget": "Must not be lower than the estimated price."})

    purchase = PurchaseRequest(
        tracking_number=next_reference(PURCHASE_PREFIX),
        token_expires_at=guest_token_expiry(),
        contact_email=email,
        contact_phone=phone,
        contact_name=name,
        currency=settings.FREIGHTDESK["DEFAULT_CURRENCY"],
        **data,
    )
    if user is not None:
        purchase.created_by = user
        purchase.client_id = user.company_id
        purchase.is_attached_to_account = True
    else:
        if not phone:
            raise InvalidRequest({"contact_phone": "This field is required."})
        purchase.prospect = get_or_create_prospect(email, phone, name)
    purchase.save()

    _log(purchase, Event.CREATED, None, PurchaseStatus.REQUESTED, user, metadata={"guest": user is None})
    logger.info(f"Purchase {purchase.tracking_number} requested by {_actor_name(user)}: {purchase.product_name}")
    return purchase


@transaction.atomic
def start_purchase_treatment(purchase_id: int, actor) -> PurchaseRequest:
    purchase, transition = _begin(purchase_id, "start_treatment", actor)
    if transition is None:
        return purchase
    return _advance(purchase, transition.target, Event.TREATMENT_STARTED, actor)


@transaction.atomic
def deliver_purchase(
    purchase_id: int,
    actor,
    actual_product_cost=None,
    delivery_cost=None,
    service_fee=None,
    completion_notes: str = "",
) -> PurchaseRequest:
    purchase, transition = _begin(purchase_id, "deliver", actor)
    if transition is None:
        return purchase
    changed = _apply_costs(
        purchase,
        {"actual_product_cost": actual_product_cost, "delivery_cost": delivery_cost, "service_fee": service_fee},
    )
    return _advance(
        purchase, transition.target, Event.DELIVERED, actor, notes=completion_notes,
        metadata={"costs": changed, "total_cost": None if purchase.total_cost is None else str(purchase.total_cost)},
        completion_notes=completion_notes or "", actual_delivery_date=timezone.now(),
    )


@transaction.atomic
def cancel_purchase(purchase_id: int, actor, reason: str) -> PurchaseRequest:
    reason = require_min_length("reason", reason)
    purchase, transition = _begin(purchase_id, "cancel", actor)
    if transition is None:
        return purchase
    return _advance(purchase, transition.target, Event.CANCELLED, actor, notes=reason, cancellation_reason=reason)


@transaction.atomic
def update_purchase_costs(purchase_id: int, actor, **costs) -> PurchaseRequest:
    purchase = _lock(purchase_id)
    require_transition("purchase", "update_costs", actor, purchase)
    if purchase.status == PurchaseStatus.CANCELLED:
        raise StateConflict(purchase.status, "update_costs", "Purchase is cancelled.")
    unknown = set(costs) - set(COST_FIELDS)
    if unknown:
        raise InvalidRequest({name: "Unknown cost field." for name in sorted(unknown)})

    changed = _apply_costs(purchase, costs)
    if not changed:
        return purchase
    purchase.save()
    _log(purchase, Event.COSTS_UPDATED, purchase.status, purchase.status, actor, metadata={"costs": changed})
    logger.info(f"Purchase {purchase.tracking_number}: costs updated by {_actor_name(actor)} ({', '.join(sorted(changed))})")
    return purchase


def get_purchase_by_token(token: Optional[str]) -> PurchaseRequest:
    return find_by_tracking_token(PurchaseRequest.objects.all(), token)
