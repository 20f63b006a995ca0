from django.conf import settings
from django.db import models

from core.models import StatusLog
from pricing.models import CargoType, Priority


class QuoteStatus(models.TextChoices):
    SUBMITTED = "SUBMITTED", "Submitted"
    SENT = "SENT", "Sent to client"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"
    EXPIRED = "EXPIRED", "Expired"
    IN_TREATMENT = "IN_TREATMENT", "In treatment"
    VALIDATED = "VALIDATED", "Validated"
    CANCELLED = "CANCELLED", "Cancelled"


class PaymentMethod(models.TextChoices):
    CASH = "CASH", "Cash"
    ON_DELIVERY = "ON_DELIVERY", "Payment on delivery"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"


class Quote(models.Model):
    quote_number = models.CharField(max_length=32, unique=True)
    client = models.ForeignKey(
        "core.Company", null=True, blank=True, on_delete=models.PROTECT, related_name="quotes"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="quotes"
    )
    status = models.CharField(max_length=20, choices=QuoteStatus.choices, default=QuoteStatus.SUBMITTED)

    origin_country = models.CharField(max_length=2)
    origin_city = models.CharField(max_length=120, blank=True)
    destination_country = models.CharField(max_length=2)
    destination_city = models.CharField(max_length=120, blank=True)
    transport_modes = models.JSONField(default=list)
    priority = models.CharField(max_length=16, choices=Priority.choices, default=Priority.STANDARD)
    cargo_type = models.CharField(max_length=16, choices=CargoType.choices, default=CargoType.GENERAL)
    total_weight = models.DecimalField(max_digits=12, decimal_places=3)
    package_count = models.PositiveIntegerField()
    packages = models.JSONField(default=list)
    estimate_snapshot = models.JSONField(default=dict)
    estimated_cost = models.DecimalField(max_digits=14, decimal_places=2)
    currency = models.CharField(max_length=3)
    valid_until = models.DateTimeField(null=True, blank=True)

    payment_method = models.CharField(max_length=20, choices=PaymentMethod.choices, null=True, blank=True)
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    rejection_reason = models.TextField(blank=True, default="")
    cancellation_reason = models.TextField(blank=True, default="")

    sent_at = models.DateTimeField(null=True, blank=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    treatment_started_at = models.DateTimeField(null=True, blank=True)
    validated_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    expired_at = models.DateTimeField(null=True, blank=True)
    payment_received_at = models.DateTimeField(null=True, blank=True)
    payment_received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["client", "-created_at"], name="quote_client_created_idx"),
            models.Index(fields=["status", "valid_until"], name="quote_status_valid_idx"),
        ]
        ordering = ["-created_at"]

    @property
    def invoice_available(self) -> bool:
        return self.status == QuoteStatus.VALIDATED and self.payment_received_at is not None

    def __str__(self):
        return self.quote_number


class QuoteLog(StatusLog):
    class Event(models.TextChoices):
        CREATED = "CREATED"
        STATUS_CHANGED = "STATUS_CHANGED"
        SENT_TO_CLIENT = "SENT_TO_CLIENT"
        ACCEPTED_BY_CLIENT = "ACCEPTED_BY_CLIENT"
        REJECTED_BY_CLIENT = "REJECTED_BY_CLIENT"
        TREATMENT_STARTED = "TREATMENT_STARTED"
        TREATMENT_VALIDATED = "TREATMENT_VALIDATED"
        CANCELLED = "CANCELLED"
        EXPIRED = "EXPIRED"
        PAYMENT_METHOD_SET = "PAYMENT_METHOD_SET"
        PAYMENT_RECEIVED = "PAYMENT_RECEIVED"

    quote = models.ForeignKey(Quote, on_delete=models.PROTECT, related_name="logs")

    class Meta(StatusLog.Meta):
        indexes = [models.Index(fields=["quote", "created_at"], name="quotelog_quote_created_idx")]
