from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Company(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=120, blank=True)
    country = models.CharField(max_length=2, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "companies"
        ordering = ["name"]

    def __str__(self):
        return self.name


class DailySequence(models.Model):
    """Per-prefix, per-day counter behind PREFIX-YYYYMMDD-NNNNN references."""

    prefix = models.CharField(max_length=8)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["prefix", "day"], name="uniq_daily_sequence_prefix_day"),
        ]

    def __str__(self):
        return f"{self.prefix} {self.day:%Y%m%d} #{self.last_value}"


class StatusLog(models.Model):
    """
    Append-only audit row written with every status change.

    Concrete logs add a foreign key to the entity they describe. Rows can be
    created but never updated or deleted.
    """

    event_type = models.CharField(max_length=40)
    old_status = models.CharField(max_length=32, null=True, blank=True)
    new_status = models.CharField(max_length=32, null=True, blank=True)
    changed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    notes = models.TextField(blank=True, default="")
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["created_at", "id"]

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Status log entries are immutable.")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Status log entries cannot be deleted.")

    def __str__(self):
        return f"{self.event_type}: {self.old_status} -> {self.new_status}"
