import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import prospects.models

STATUS_CHOICES = [
    ("REQUESTED", "Requested"),
    ("IN_TREATMENT", "In treatment"),
    ("DELIVERED", "Delivered"),
    ("CANCELLED", "Cancelled"),
]
DELIVERY_MODE_CHOICES = [("STANDARD", "Standard"), ("EXPRESS", "Express")]


def _money():
    return models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)


def _fk(to, related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=to,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("prospects", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PurchaseRequest",
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
                ("product_name", models.CharField(max_length=200)),
                ("product_url", models.URLField(blank=True, max_length=500)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("product_specs", models.TextField(blank=True, default="")),
                ("estimated_price", _money()),
                ("max_budget", _money()),
                ("delivery_address", models.TextField()),
                ("delivery_city", models.CharField(max_length=120)),
                ("delivery_postal_code", models.CharField(blank=True, max_length=16)),
                ("delivery_country", models.CharField(max_length=2)),
                ("delivery_mode", models.CharField(choices=DELIVERY_MODE_CHOICES, default="STANDARD", max_length=16)),
                ("requested_delivery_date", models.DateField(blank=True, null=True)),
                ("actual_product_cost", _money()),
                ("delivery_cost", _money()),
                ("service_fee", _money()),
                ("total_cost", _money()),
                ("currency", models.CharField(blank=True, max_length=3)),
                ("actual_delivery_date", models.DateTimeField(blank=True, null=True)),
                ("completion_notes", models.TextField(blank=True, default="")),
                ("client", _fk("core.company", "purchaserequests")),
                ("created_by", _fk(settings.AUTH_USER_MODEL, "purchaserequests")),
                ("prospect", _fk("prospects.prospect", "purchaserequests")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["client", "-created_at"], name="purchase_client_created_idx"),
                    models.Index(fields=["contact_email"], name="purchase_contact_email_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PurchaseLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(max_length=40)),
                ("old_status", models.CharField(blank=True, max_length=32, null=True)),
                ("new_status", models.CharField(blank=True, max_length=32, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("changed_by", _fk(settings.AUTH_USER_MODEL, "+")),
                (
                    "purchase",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="logs",
                        to="purchases.purchaserequest",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "abstract": False,
                "indexes": [models.Index(fields=["purchase", "created_at"], name="purchaselog_created_idx")],
            },
        ),
    ]
