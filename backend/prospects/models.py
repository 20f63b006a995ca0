import uuid

from django.conf import settings
from django.db import models


def new_token() -> str:
    return uuid.uuid4().hex


class ProspectStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONVERTED = "CONVERTED", "Converted"
    EXPIRED = "EXPIRED", "Expired"


class Prospect(models.Model):
    """A visitor who filed a request without an account, keyed by email."""

    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=32, blank=True)
    name = models.CharField(max_length=120, blank=True)
    company_name = models.CharField(max_length=255, blank=True)
    invitation_token = models.CharField(max_length=64, unique=True, default=new_token)
    invitation_expires_at = models.DateTimeField()
    status = models.CharField(max_length=16, choices=ProspectStatus.choices, default=ProspectStatus.PENDING)
    converted_user = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    converted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]

    def save(self, *args, **kwargs):
        self.email = (self.email or "").strip().lower()
        return super().save(*args, **kwargs)

    def __str__(self):
        return self.email


class GuestRequest(models.Model):
    """
    Fields shared by requests that may be filed without an account.

    A guest request carries its own contact details and an opaque tracking
    token; it is attached to a user account later, when someone registers
    with the same email or phone.
    """

    tracking_number = models.CharField(max_length=32, unique=True)
    tracking_token = models.CharField(max_length=64, unique=True, default=new_token)
    token_expires_at = models.DateTimeField(null=True, blank=True)

    contact_name = models.CharField(max_length=120, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=32, blank=True)

    prospect = models.ForeignKey(
        Prospect, null=True, blank=True, on_delete=models.SET_NULL, related_name="%(class)ss"
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="%(class)ss"
    )
    client = models.ForeignKey(
        "core.Company", null=True, blank=True, on_delete=models.SET_NULL, related_name="%(class)ss"
    )
    is_attached_to_account = models.BooleanField(default=False)

    cancellation_reason = models.TextField(blank=True, default="")
    internal_notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return self.tracking_number
