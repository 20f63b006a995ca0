from django.db import models

from core.models import StatusLog
from prospects.models import GuestRequest


class PickupStatus(models.TextChoices):
    REQUESTED = "REQUESTED", "Requested"
    SCHEDULED = "SCHEDULED", "Scheduled"
    IN_PROGRESS = "IN_PROGRESS", "In progress"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class PickupTimeSlot(models.TextChoices):
    MORNING = "MORNING", "Morning (8h-12h)"
    AFTERNOON = "AFTERNOON", "Afternoon (12h-17h)"
    EVENING = "EVENING", "Evening (17h-20h)"
    FLEXIBLE = "FLEXIBLE", "Flexible"


class PickupRequest(GuestRequest):
    status = models.CharField(max_length=20, choices=PickupStatus.choices, default=PickupStatus.REQUESTED)
    company_name = models.CharField(max_length=255, blank=True)

    pickup_address = models.TextField()
    pickup_city = models.CharField(max_length=120)
    pickup_postal_code = models.CharField(max_length=16, blank=True)
    pickup_country = models.CharField(max_length=2)
    on_site_contact = models.CharField(max_length=120, blank=True)
    on_site_phone = models.CharField(max_length=32, blank=True)

    requested_date = models.DateField()
    time_slot = models.CharField(max_length=16, choices=PickupTimeSlot.choices, default=PickupTimeSlot.FLEXIBLE)
    scheduled_date = models.DateField(null=True, blank=True)
    driver_name = models.CharField(max_length=120, blank=True)
    driver_phone = models.CharField(max_length=32, blank=True)

    cargo_description = models.TextField(blank=True, default="")
    estimated_weight = models.DecimalField(max_digits=12, decimal_places=3, null=True, blank=True)
    estimated_volume = models.DecimalField(max_digits=10, decimal_places=3, null=True, blank=True)
    package_count = models.PositiveIntegerField(default=1)
    special_instructions = models.TextField(blank=True, default="")
    access_instructions = models.TextField(blank=True, default="")

    actual_pickup_date = models.DateTimeField(null=True, blank=True)
    completion_notes = models.TextField(blank=True, default="")

    class Meta(GuestRequest.Meta):
        indexes = [
            models.Index(fields=["client", "-created_at"], name="pickup_client_created_idx"),
            models.Index(fields=["contact_email"], name="pickup_contact_email_idx"),
        ]


class PickupLog(StatusLog):
    class Event(models.TextChoices):
        CREATED = "CREATED"
        SCHEDULED = "SCHEDULED"
        RESCHEDULED = "RESCHEDULED"
        STARTED = "STARTED"
        COMPLETED = "COMPLETED"
        CANCELLED = "CANCELLED"
        ATTACHED_TO_ACCOUNT = "ATTACHED_TO_ACCOUNT"

    pickup = models.ForeignKey(PickupRequest, on_delete=models.PROTECT, related_name="logs")

    class Meta(StatusLog.Meta):
        indexes = [models.Index(fields=["pickup", "created_at"], name="pickuplog_pickup_created_idx")]
