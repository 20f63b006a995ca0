from django.db import models

from core.models import StatusLog
from prospects.models import GuestRequest


class PurchaseStatus(models.TextChoices):
    REQUESTED = "REQUESTED", "Requested"
    IN_TREATMENT = "IN_TREATMENT", "In treatment"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class DeliveryMode(models.TextChoices):
    STANDARD = "STANDARD", "Standard"
    EXPRESS = "EXPRESS", "Express"


def _money():
    return models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)


class PurchaseRequest(GuestRequest):
    """A delegated purchase: we buy the product for the client and deliver it."""

    status = models.CharField(max_length=20, choices=PurchaseStatus.choices, default=PurchaseStatus.REQUESTED)

    product_name = models.CharField(max_length=200)
    product_url = models.URLField(max_length=500, blank=True)
    quantity = models.PositiveIntegerField(default=1)
    product_specs = models.TextField(blank=True, default="")
    estimated_price = _money()
    max_budget = _money()

    delivery_address = models.TextField()
    delivery_city = models.CharField(max_length=120)
    delivery_postal_code = models.CharField(max_length=16, blank=True)
    delivery_country = models.CharField(max_length=2)
    delivery_mode = models.CharField(max_length=16, choices=DeliveryMode.choices, default=DeliveryMode.STANDARD)
    requested_delivery_date = models.DateField(null=True, blank=True)

    # filled in by staff while handling the purchase
    actual_product_cost = _money()
    delivery_cost = _money()
    service_fee = _money()
    service_fee_is_manual = models.BooleanField(default=False)
    total_cost = _money()
    currency = models.CharField(max_length=3, blank=True)

    actual_delivery_date = models.DateTimeField(null=True, blank=True)
    completion_notes = models.TextField(blank=True, default="")

    class Meta(GuestRequest.Meta):
        indexes = [
            models.Index(fields=["client", "-created_at"], name="purchase_client_created_idx"),
            models.Index(fields=["contact_email"], name="purchase_contact_email_idx"),
        ]


class PurchaseLog(StatusLog):
    class Event(models.TextChoices):
        CREATED = "CREATED"
        TREATMENT_STARTED = "TREATMENT_STARTED"
        DELIVERED = "DELIVERED"
        CANCELLED = "CANCELLED"
        COSTS_UPDATED = "COSTS_UPDATED"
        ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"

    purchase = models.ForeignKey(PurchaseRequest, on_delete=models.PROTECT, related_name="logs")

    class Meta(StatusLog.Meta):
        indexes = [models.Index(fields=["purchase", "created_at"], name="purchaselog_created_idx")]
