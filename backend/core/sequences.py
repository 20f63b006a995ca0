from __future__ import annotations

import datetime
from typing import Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import DailySequence

QUOTE_PREFIX = "QTE"
SHIPMENT_PREFIX = "SHP"
PICKUP_PREFIX = "PK"
PURCHASE_PREFIX = "PR"


def format_reference(prefix: str, day: datetime.date, value: int) -> str:
    return f"{prefix}-{day:%Y%m%d}-{value:05d}"


def next_reference(prefix: str, today: Optional[datetime.date] = None) -> str:
    """
    Allocate the next PREFIX-YYYYMMDD-NNNNN reference.

    The counter row for (prefix, day) is locked for the rest of the enclosing
    transaction, so two concurrent callers never read the same value.
    """
    day = today or timezone.localdate()
    with transaction.atomic():
        seq, _ = DailySequence.objects.select_for_update().get_or_create(prefix=prefix, day=day)
        DailySequence.objects.filter(pk=seq.pk).update(last_value=F("last_value") + 1)
        seq.refresh_from_db(fields=["last_value"])
    return format_reference(prefix, day, seq.last_value)
