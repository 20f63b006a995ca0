from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class TransportMode(models.TextChoices):
    ROAD = "ROAD", "Road"
    SEA = "SEA", "Sea"
    AIR = "AIR", "Air"
    RAIL = "RAIL", "Rail"


class CargoType(models.TextChoices):
    GENERAL = "GENERAL", "General cargo"
    DANGEROUS = "DANGEROUS", "Dangerous goods"
    PERISHABLE = "PERISHABLE", "Perishable"
    FRAGILE = "FRAGILE", "Fragile"
    BULK = "BULK", "Bulk"
    CONTAINER = "CONTAINER", "Container"
    PALLETIZED = "PALLETIZED", "Palletized"
    OTHER = "OTHER", "Other"


class Priority(models.TextChoices):
    STANDARD = "STANDARD", "Standard"
    NORMAL = "NORMAL", "Normal"
    EXPRESS = "EXPRESS", "Express"
    URGENT = "URGENT", "Urgent"


class PricingConfig(models.Model):
    """
    The single live set of pricing tables.

    Maps are keyed by enum value. Decimal coefficients are stored as strings
    so they round-trip without float drift.
    """

    SINGLETON_ID = 1

    default_rate_per_kg = models.DecimalField(max_digits=12, decimal_places=4)
    default_rate_per_m3 = models.DecimalField(max_digits=12, decimal_places=4)
    volumetric_weight_ratios = models.JSONField(default=dict)
    use_volumetric_weight_per_mode = models.JSONField(default=dict)
    transport_multipliers = models.JSONField(default=dict)
    cargo_type_surcharges = models.JSONField(default=dict)
    priority_surcharges = models.JSONField(default=dict)
    delivery_speeds_per_mode = models.JSONField(default=dict)
    version = models.PositiveIntegerField(default=1)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="+"
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "pricing configuration"

    def save(self, *args, **kwargs):
        self.pk = self.SINGLETON_ID
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("The pricing configuration cannot be deleted.")

    def __str__(self):
        return f"Pricing configuration v{self.version}"


class TransportRate(models.Model):
    origin_country = models.CharField(max_length=2)
    destination_country = models.CharField(max_length=2)
    transport_mode = models.CharField(max_length=8, choices=TransportMode.choices)
    rate_per_kg = models.DecimalField(max_digits=12, decimal_places=4)
    rate_per_m3 = models.DecimalField(max_digits=12, decimal_places=4, null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["origin_country", "destination_country", "transport_mode"],
                name="uniq_transport_rate_route_mode",
            ),
        ]
        ordering = ["origin_country", "destination_country", "transport_mode"]

    def save(self, *args, **kwargs):
        self.origin_country = (self.origin_country or "").upper()
        self.destination_country = (self.destination_country or "").upper()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.origin_country}->{self.destination_country} {self.transport_mode} @ {self.rate_per_kg}/kg"
