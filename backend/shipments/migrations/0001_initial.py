import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("DRAFT", "Draft"),
    ("PENDING_APPROVAL", "Pending approval"),
    ("APPROVED", "Approved"),
    ("PICKED_UP", "Picked up"),
    ("IN_TRANSIT", "In transit"),
    ("AT_CUSTOMS", "At customs"),
    ("CUSTOMS_CLEARED", "Customs cleared"),
    ("OUT_FOR_DELIVERY", "Out for delivery"),
    ("READY_FOR_PICKUP", "Ready for pickup"),
    ("DELIVERED", "Delivered"),
    ("CANCELLED", "Cancelled"),
    ("ON_HOLD", "On hold"),
    ("EXCEPTION", "Exception"),
]
CARGO_CHOICES = [
    ("GENERAL", "General cargo"),
    ("DANGEROUS", "Dangerous goods"),
    ("PERISHABLE", "Perishable"),
    ("FRAGILE", "Fragile"),
    ("BULK", "Bulk"),
    ("CONTAINER", "Container"),
    ("PALLETIZED", "Palletized"),
    ("OTHER", "Other"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("quotes", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Shipment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tracking_number", models.CharField(max_length=32, unique=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="DRAFT", max_length=20)),
                ("origin_country", models.CharField(max_length=2)),
                ("origin_city", models.CharField(blank=True, max_length=120)),
                ("destination_country", models.CharField(max_length=2)),
                ("destination_city", models.CharField(blank=True, max_length=120)),
                ("cargo_type", models.CharField(choices=CARGO_CHOICES, default="GENERAL", max_length=16)),
                ("cargo_description", models.TextField(blank=True, default="")),
                ("weight", models.DecimalField(decimal_places=3, max_digits=12)),
                ("package_count", models.PositiveIntegerField(default=1)),
                ("transport_modes", models.JSONField(default=list)),
                ("estimated_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("actual_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("currency", models.CharField(blank=True, max_length=3)),
                ("internal_notes", models.TextField(blank=True, default="")),
                ("requested_pickup_date", models.DateField(blank=True, null=True)),
                ("actual_pickup_date", models.DateTimeField(blank=True, null=True)),
                ("estimated_delivery_date", models.DateField(blank=True, null=True)),
                ("actual_delivery_date", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shipments",
                        to="core.company",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "quote",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="shipment",
                        to="quotes.quote",
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="shipment",
            index=models.Index(fields=["client", "-created_at"], name="shipment_client_created_idx"),
        ),
        migrations.CreateModel(
            name="TrackingEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=STATUS_CHOICES, max_length=20)),
                ("location", models.CharField(max_length=255)),
                ("latitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("longitude", models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ("description", models.TextField(blank=True, default="")),
                ("internal_notes", models.TextField(blank=True, default="")),
                ("timestamp", models.DateTimeField()),
                (
                    "recorded_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "shipment",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events",
                        to="shipments.shipment",
                    ),
                ),
            ],
            options={"ordering": ["-timestamp", "-id"]},
        ),
    ]
