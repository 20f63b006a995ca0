"""
Quote lifecycle.

Every operation runs in one transaction: the quote row is locked, the actor
is checked against the central policy, the state machine resolves the
action, and the status change and its log row are written together. An
action repeated on a quote already in its target state returns the quote
unchanged, except `validate`, which never runs twice.
"""
from __future__ import annotations

import datetime
import logging
from typing import Optional, Sequence

from django.conf import settings
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from accounts.models import UserRole
from accounts.permissions import require_transition
from core.exceptions import InvalidRequest, StateConflict, require_min_length
from core.sequences import QUOTE_PREFIX, next_reference
from pricing.dataclasses import Route
from pricing.services.config_service import load_snapshot
from pricing.services.pricing_service import estimate_multi_package, normalize_packages
from pricing.services.utils import whole_number
from shipments.services import create_shipment_from_quote

from .models import PaymentMethod, Quote, QuoteLog, QuoteStatus
from .workflow import QUOTE_MACHINE

logger = logging.getLogger(__name__)

Event = QuoteLog.Event


def _actor_name(actor) -> str:
    return getattr(actor, "username", None) or "system"


def _log(quote: Quote, event: str, old_status, new_status, actor, notes: str = "", metadata=None) -> QuoteLog:
    return QuoteLog.objects.create(
        quote=quote,
        event_type=event,
        old_status=old_status,
        new_status=new_status,
        changed_by=actor,
        notes=notes or "",
        metadata=metadata or {},
    )


def _lock(quote_id: int) -> Quote:
    return get_object_or_404(Quote.objects.select_for_update(), pk=quote_id)


def _begin(quote_id: int, action: str, actor):
    quote = _lock(quote_id)
    require_transition("quote", action, actor, quote)
    return quote, QUOTE_MACHINE.resolve(quote.status, action)


def _advance(quote: Quote, target: str, event: str, actor, notes: str = "", metadata=None, **changes) -> Quote:
    old_status = quote.status
    quote.status = target
    for name, value in changes.items():
        setattr(quote, name, value)
    quote.save()
    _log(quote, event, old_status, target, actor, notes, metadata)
    logger.info(f"Quote {quote.quote_number}: {old_status} -> {target} by {_actor_name(actor)}")
    return quote


def parse_payment_method(value) -> str:
    method = str(value or "").strip().upper()
    if method not in PaymentMethod.values:
        raise InvalidRequest({"payment_method": f"Choose one of {', '.join(PaymentMethod.values)}."})
    return method


@transaction.atomic
def create_quote(
    actor,
    route: Route,
    packages: Sequence,
    transport_modes: Sequence[str],
    priority: str,
    client=None,
) -> Quote:
    require_transition("quote", "create", actor)
    if getattr(actor, "role", None) == UserRole.CLIENT:
        client = actor.company

    snapshot = load_snapshot(route.origin_country, route.destination_country)
    result = estimate_multi_package(route, packages, transport_modes, priority, snapshot)
    lines = normalize_packages(packages)

    quote = Quote.objects.create(
        quote_number=next_reference(QUOTE_PREFIX),
        client=client,
        created_by=actor,
        status=QuoteStatus.SUBMITTED,
        origin_country=route.origin_country.upper(),
        origin_city=route.origin_city,
        destination_country=route.destination_country.upper(),
        destination_city=route.destination_city,
        transport_modes=result.transport_modes,
        priority=result.priority,
        cargo_type=result.dominant_cargo_type,
        total_weight=result.total_weight,
        package_count=result.total_package_count,
        packages=[line.to_dict() for line in lines],
        estimate_snapshot=result.to_dict(),
        estimated_cost=result.total_price,
        currency=result.currency,
    )
    _log(quote, Event.CREATED, None, QuoteStatus.SUBMITTED, actor, metadata={"config_version": snapshot.version})
    logger.info(f"Quote {quote.quote_number} created by {_actor_name(actor)}: {quote.estimated_cost} {quote.currency}")
    return quote


@transaction.atomic
def send_quote(quote_id: int, actor) -> Quote:
    quote, transition = _begin(quote_id, "send", actor)
    if transition is None:
        return quote
    now = timezone.now()
    days = settings.FREIGHTDESK["QUOTE_VALIDITY_DAYS"]
    return _advance(
        quote, transition.target, Event.SENT_TO_CLIENT, actor,
        sent_at=now, valid_until=now + datetime.timedelta(days=days),
    )


@transaction.atomic
def accept_quote(quote_id: int, actor, payment_method) -> Quote:
    method = parse_payment_method(payment_method)
    quote, transition = _begin(quote_id, "accept", actor)
    if transition is None:
        if quote.payment_method != method:
            raise StateConflict(
                quote.status, "accept",
                f"Quote is already accepted with payment method {quote.payment_method}.",
            )
        return quote

    now = timezone.now()
    if quote.valid_until and now > quote.valid_until:
        raise StateConflict(quote.status, "accept", f"Quote expired on {quote.valid_until:%Y-%m-%d}.")
    return _advance(
        quote, transition.target, Event.ACCEPTED_BY_CLIENT, actor,
        metadata={"payment_method": method},
        payment_method=method, accepted_at=now,
    )


@transaction.atomic
def reject_quote(quote_id: int, actor, reason: str) -> Quote:
    reason = require_min_length("reason", reason)
    quote, transition = _begin(quote_id, "reject", actor)
    if transition is None:
        return quote
    return _advance(
        quote, transition.target, Event.REJECTED_BY_CLIENT, actor, notes=reason,
        rejection_reason=reason, rejected_at=timezone.now(),
    )


@transaction.atomic
def start_treatment(quote_id: int, actor, comment: Optional[str] = None) -> Quote:
    quote, transition = _begin(quote_id, "start_treatment", actor)
    if transition is None:
        return quote
    if not quote.payment_method:
        raise StateConflict(quote.status, "start_treatment", "The client has not chosen a payment method.")
    return _advance(
        quote, transition.target, Event.TREATMENT_STARTED, actor, notes=comment or "",
        metadata={"payment_method": quote.payment_method},
        agent=actor, treatment_started_at=timezone.now(),
    )


@transaction.atomic
def validate_quote(
    quote_id: int,
    actor,
    package_count,
    cargo_description: Optional[str] = None,
    comment: Optional[str] = None,
) -> Quote:
    """
    Close treatment and open the shipment.

    The shipment and the status change commit together or not at all.
    """
    try:
        package_count = whole_number(package_count)
    except ValueError:
        raise InvalidRequest({"package_count": "Must be a whole number."})
    if package_count < 1:
        raise InvalidRequest({"package_count": "Must be at least 1."})

    quote, transition = _begin(quote_id, "validate", actor)
    shipment = create_shipment_from_quote(quote, actor, package_count, cargo_description or "")
    return _advance(
        quote, transition.target, Event.TREATMENT_VALIDATED, actor, notes=comment or "",
        metadata={"tracking_number": shipment.tracking_number, "package_count": package_count},
        validated_at=timezone.now(),
    )


@transaction.atomic
def cancel_quote(quote_id: int, actor, reason: str) -> Quote:
    reason = require_min_length("reason", reason)
    quote, transition = _begin(quote_id, "cancel", actor)
    if transition is None:
        return quote
    return _advance(
        quote, transition.target, Event.CANCELLED, actor, notes=reason,
        cancellation_reason=reason, cancelled_at=timezone.now(),
    )


@transaction.atomic
def expire_quote(quote_id: int, actor=None) -> Quote:
    quote, transition = _begin(quote_id, "expire", actor)
    if transition is None:
        return quote
    return _advance(quote, transition.target, Event.EXPIRED, actor, expired_at=timezone.now())


def expire_overdue_quotes(now: Optional[datetime.datetime] = None) -> int:
    """Expire every sent quote whose validity has lapsed. Returns how many were expired."""
    now = now or timezone.now()
    candidates = list(
        Quote.objects.filter(status=QuoteStatus.SENT, valid_until__lt=now).values_list("pk", flat=True)
    )
    expired = 0
    for pk in candidates:
        with transaction.atomic():
            # re-checked under lock: the client may have answered meanwhile
            quote = (
                Quote.objects.select_for_update()
                .filter(pk=pk, status=QuoteStatus.SENT, valid_until__lt=now)
                .first()
            )
            if quote is None:
                continue
            require_transition("quote", "expire", None, quote)
            _advance(quote, QuoteStatus.EXPIRED, Event.EXPIRED, None, expired_at=now)
            expired += 1
    return expired


@transaction.atomic
def set_payment_method(quote_id: int, actor, payment_method) -> Quote:
    method = parse_payment_method(payment_method)
    quote = _lock(quote_id)
    require_transition("quote", "set_payment_method", actor, quote)
    if quote.status not in (QuoteStatus.ACCEPTED, QuoteStatus.IN_TREATMENT):
        raise StateConflict(quote.status, "set_payment_method")
    if quote.payment_method == method:
        return quote

    previous = quote.payment_method
    quote.payment_method = method
    quote.save(update_fields=["payment_method", "updated_at"])
    _log(
        quote, Event.PAYMENT_METHOD_SET, quote.status, quote.status, actor,
        metadata={"previous": previous, "payment_method": method},
    )
    logger.info(f"Quote {quote.quote_number}: payment method {previous} -> {method} by {_actor_name(actor)}")
    return quote


@transaction.atomic
def mark_payment_received(quote_id: int, actor) -> Quote:
    quote = _lock(quote_id)
    require_transition("quote", "mark_payment_received", actor, quote)
    if quote.status != QuoteStatus.VALIDATED:
        raise StateConflict(quote.status, "mark_payment_received")
    if quote.payment_received_at is not None:
        raise StateConflict(
            quote.status, "mark_payment_received",
            f"Payment was already recorded on {quote.payment_received_at:%Y-%m-%d}.",
        )

    quote.payment_received_at = timezone.now()
    quote.payment_received_by = actor
    quote.save(update_fields=["payment_received_at", "payment_received_by", "updated_at"])
    _log(
        quote, Event.PAYMENT_RECEIVED, quote.status, quote.status, actor,
        metadata={"payment_method": quote.payment_method},
    )
    logger.info(f"Quote {quote.quote_number}: payment received, recorded by {_actor_name(actor)}")
    return quote
