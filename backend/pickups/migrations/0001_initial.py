import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import prospects.models

STATUS_CHOICES = [
    ("REQUESTED", "Requested"),
    ("SCHEDULED", "Scheduled"),
    ("IN_PROGRESS", "In progress"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]
TIME_SLOT_CHOICES = [
    ("MORNING", "Morning (8h-12h)"),
    ("AFTERNOON", "Afternoon (12h-17h)"),
    ("EVENING", "Evening (17h-20h)"),
    ("FLEXIBLE", "Flexible"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("prospects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PickupRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("tracking_number", models.CharField(max_length=32, unique=True)),
                ("tracking_token", models.CharField(default=prospects.models.new_token, max_length=64, unique=True)),
                ("token_expires_at", models.DateTimeField(blank=True, null=True)),
                ("contact_name", models.CharField(blank=True, max_length=120)),
                ("contact_email", models.EmailField(blank=True, max_length=254)),
                ("contact_phone", models.CharField(blank=True, max_length=32)),
                ("is_attached_to_account", models.BooleanField(default=False)),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("internal_notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="REQUESTED", max_length=20)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("pickup_address", models.TextField()),
                ("pickup_city", models.CharField(max_length=120)),
                ("pickup_postal_code", models.CharField(blank=True, max_length=16)),
                ("pickup_country", models.CharField(max_length=2)),
                ("on_site_contact", models.CharField(blank=True, max_length=120)),
                ("on_site_phone", models.CharField(blank=True, max_length=32)),
                ("requested_date", models.DateField()),
                ("time_slot", models.CharField(choices=TIME_SLOT_CHOICES, default="FLEXIBLE", max_length=16)),
                ("scheduled_date", models.DateField(blank=True, null=True)),
                ("driver_name", models.CharField(blank=True, max_length=120)),
                ("driver_phone", models.CharField(blank=True, max_length=32)),
                ("cargo_description", models.TextField(blank=True, default="")),
                ("estimated_weight", models.DecimalField(blank=True, decimal_places=3, max_digits=12, null=True)),
                ("estimated_volume", models.DecimalField(blank=True, decimal_places=3, max_digits=10, null=True)),
                ("package_count", models.PositiveIntegerField(default=1)),
                ("special_instructions", models.TextField(blank=True, default="")),
                ("access_instructions", models.TextField(blank=True, default="")),
                ("actual_pickup_date", models.DateTimeField(blank=True, null=True)),
                ("completion_notes", models.TextField(blank=True, default="")),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pickuprequests",
                        to="core.company",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pickuprequests",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "prospect",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="pickuprequests",
                        to="prospects.prospect",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["client", "-created_at"], name="pickup_client_created_idx"),
                    models.Index(fields=["contact_email"], name="pickup_contact_email_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PickupLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(max_length=40)),
                ("old_status", models.CharField(blank=True, max_length=32, null=True)),
                ("new_status", models.CharField(blank=True, max_length=32, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "pickup",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="logs",
                        to="pickups.pickuprequest",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "abstract": False,
                "indexes": [models.Index(fields=["pickup", "created_at"], name="pickuplog_pickup_created_idx")],
            },
        ),
    ]
