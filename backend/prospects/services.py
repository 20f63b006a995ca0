"""
Prospects and guest requests.

Pickups and purchases may be filed without an account. The contact email
identifies a Prospect, and each request gets an opaque tracking token valid
for a limited time. When the person later registers, `attach_guest_requests`
moves every matching request onto their account.
"""
from __future__ import annotations

import datetime
import logging
import re
from typing import Dict, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.http import Http404
from django.utils import timezone

from core.exceptions import InvalidRequest, TokenExpired
from pickups.models import PickupLog, PickupRequest
from purchases.models import PurchaseLog, PurchaseRequest

from .models import Prospect, ProspectStatus, new_token

logger = logging.getLogger(__name__)

ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"

_PHONE_NOISE = re.compile(r"[\s().-]")

# (request model, its log model, the log's foreign key to the request)
ATTACHABLE = (
    (PickupRequest, PickupLog, "pickup"),
    (PurchaseRequest, PurchaseLog, "purchase"),
)


def normalize_email(value) -> str:
    return (value or "").strip().lower()


def normalize_phone(value) -> str:
    return _PHONE_NOISE.sub("", value or "")


def guest_token_expiry(now: Optional[datetime.datetime] = None) -> datetime.datetime:
    now = now or timezone.now()
    return now + datetime.timedelta(hours=settings.FREIGHTDESK["GUEST_TOKEN_TTL_HOURS"])


def find_by_tracking_token(queryset, token: str):
    """Guest request for a tracking token; 404 when unknown, 410 once the link has expired."""
    obj = queryset.filter(tracking_token=token).first() if token else None
    if obj is None:
        raise Http404("No request found for this tracking link.")
    if obj.token_expires_at is not None and obj.token_expires_at <= timezone.now():
        raise TokenExpired("This tracking link has expired.")
    return obj


@transaction.atomic
def get_or_create_prospect(email, phone: str = "", name: str = "", company_name: str = "") -> Prospect:
    email = normalize_email(email)
    if not email:
        raise InvalidRequest({"contact_email": "This field is required."})
    phone = normalize_phone(phone)
    expires = timezone.now() + datetime.timedelta(days=settings.FREIGHTDESK["PROSPECT_INVITATION_TTL_DAYS"])

    prospect, created = Prospect.objects.select_for_update().get_or_create(
        email=email,
        defaults={
            "phone": phone,
            "name": name or "",
            "company_name": company_name or "",
            "invitation_expires_at": expires,
        },
    )
    if created:
        logger.info(f"Prospect {prospect.pk} created for {email}")
        return prospect
    if prospect.status == ProspectStatus.CONVERTED:
        return prospect

    prospect.phone = phone or prospect.phone
    prospect.name = name or prospect.name
    prospect.company_name = company_name or prospect.company_name
    prospect.invitation_token = new_token()
    prospect.invitation_expires_at = expires
    prospect.status = ProspectStatus.PENDING
    prospect.save()
    return prospect


def get_prospect_by_token(token: str) -> Optional[Prospect]:
    prospect = Prospect.objects.filter(invitation_token=token).first() if token else None
    if prospect is None:
        return None
    if prospect.status == ProspectStatus.PENDING and prospect.invitation_expires_at <= timezone.now():
        prospect.status = ProspectStatus.EXPIRED
        prospect.save(update_fields=["status"])
        logger.info(f"Invitation for prospect {prospect.pk} expired")
    if prospect.status == ProspectStatus.EXPIRED:
        raise TokenExpired("This invitation has expired.")
    return prospect


@transaction.atomic
def attach_guest_requests(user) -> Dict:
    """
    Attach unattached guest pickups and purchases to `user`.

    A request matches on its contact email (case-insensitive) or its contact
    phone. Each attached request gets one ATTACHED_TO_ACCOUNT log row, and
    matching prospects are marked converted.
    """
    email = normalize_email(user.email)
    phone = normalize_phone(getattr(user, "phone", ""))
    result = {"pickups": [], "purchases": [], "prospects_converted": 0}
    if not email and not phone:
        return result

    match = Q()
    if email:
        match |= Q(contact_email__iexact=email)
    if phone:
        match |= Q(contact_phone=phone)

    for model, log_model, fk in ATTACHABLE:
        attached = result[f"{fk}s"]
        for req in model.objects.select_for_update().filter(match, is_attached_to_account=False).order_by("id"):
            matched_by = "email" if email and normalize_email(req.contact_email) == email else "phone"
            req.created_by = user
            if user.company_id:
                req.client_id = user.company_id
            req.is_attached_to_account = True
            req.save(update_fields=["created_by", "client", "is_attached_to_account", "updated_at"])
            log_model.objects.create(
                **{fk: req},
                event_type=ATTACHED_TO_ACCOUNT,
                old_status=req.status,
                new_status=req.status,
                changed_by=user,
                metadata={"matched_by": matched_by, "user_id": user.pk},
            )
            attached.append(req.tracking_number)

    prospect_match = Q(email=email) if email else Q()
    if phone:
        prospect_match |= Q(phone=phone)
    result["prospects_converted"] = (
        Prospect.objects.filter(prospect_match)
        .exclude(status=ProspectStatus.CONVERTED)
        .update(status=ProspectStatus.CONVERTED, converted_user=user, converted_at=timezone.now())
    )

    logger.info(
        f"Attached {len(result['pickups'])} pickups and {len(result['purchases'])} purchases "
        f"to user {user.username}"
    )
    return result
