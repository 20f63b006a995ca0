from django.conf import settings
from django.db import models

from pricing.models import CargoType


class ShipmentStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    PENDING_APPROVAL = "PENDING_APPROVAL", "Pending approval"
    APPROVED = "APPROVED", "Approved"
    PICKED_UP = "PICKED_UP", "Picked up"
    IN_TRANSIT = "IN_TRANSIT", "In transit"
    AT_CUSTOMS = "AT_CUSTOMS", "At customs"
    CUSTOMS_CLEARED = "CUSTOMS_CLEARED", "Customs cleared"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY", "Out for delivery"
    READY_FOR_PICKUP = "READY_FOR_PICKUP", "Ready for pickup"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"
    ON_HOLD = "ON_HOLD", "On hold"
    EXCEPTION = "EXCEPTION", "Exception"


class Shipment(models.Model):
    tracking_number = models.CharField(max_length=32, unique=True)
    quote = models.OneToOneField(
        "quotes.Quote", null=True, blank=True, on_delete=models.PROTECT, related_name="shipment"
    )
    client = models.ForeignKey(
        "core.Company", null=True, blank=True, on_delete=models.PROTECT, related_name="shipments"
    )
    status = models.CharField(max_length=20, choices=ShipmentStatus.choices, default=ShipmentStatus.DRAFT)

    origin_country = models.CharField(max_length=2)
    origin_city = models.CharField(max_length=120, blank=True)
    destination_country = models.CharField(max_length=2)
    destination_city = models.CharField(max_length=120, blank=True)
    cargo_type = models.CharField(max_length=16, choices=CargoType.choices, default=CargoType.GENERAL)
    cargo_description = models.TextField(blank=True, default="")
    weight = models.DecimalField(max_digits=12, decimal_places=3)
    package_count = models.PositiveIntegerField(default=1)
    transport_modes = models.JSONField(default=list)

    # internal only, never part of the public tracking view
    estimated_cost = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    actual_cost = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, blank=True)
    internal_notes = models.TextField(blank=True, default="")

    requested_pickup_date = models.DateField(null=True, blank=True)
    actual_pickup_date = models.DateTimeField(null=True, blank=True)
    estimated_delivery_date = models.DateField(null=True, blank=True)
    actual_delivery_date = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["client", "-created_at"], name="shipment_client_created_idx")]

    def __str__(self):
        return self.tracking_number


class TrackingEvent(models.Model):
    shipment = models.ForeignKey(Shipment, on_delete=models.CASCADE, related_name="events")
    status = models.CharField(max_length=20, choices=ShipmentStatus.choices)
    location = models.CharField(max_length=255)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    description = models.TextField(blank=True, default="")
    internal_notes = models.TextField(blank=True, default="")
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    timestamp = models.DateTimeField()

    class Meta:
        ordering = ["-timestamp", "-id"]

    def __str__(self):
        return f"{self.shipment.tracking_number} {self.status} @ {self.location}"
