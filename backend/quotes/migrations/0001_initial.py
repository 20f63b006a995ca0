import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("SUBMITTED", "Submitted"),
    ("SENT", "Sent to client"),
    ("ACCEPTED", "Accepted"),
    ("REJECTED", "Rejected"),
    ("EXPIRED", "Expired"),
    ("IN_TREATMENT", "In treatment"),
    ("VALIDATED", "Validated"),
    ("CANCELLED", "Cancelled"),
]
PRIORITY_CHOICES = [("STANDARD", "Standard"), ("NORMAL", "Normal"), ("EXPRESS", "Express"), ("URGENT", "Urgent")]
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
PAYMENT_CHOICES = [("CASH", "Cash"), ("ON_DELIVERY", "Payment on delivery"), ("BANK_TRANSFER", "Bank transfer")]


def _user_fk(related_name):
    return models.ForeignKey(
        blank=True,
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        related_name=related_name,
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quote_number", models.CharField(max_length=32, unique=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="SUBMITTED", max_length=20)),
                ("origin_country", models.CharField(max_length=2)),
                ("origin_city", models.CharField(blank=True, max_length=120)),
                ("destination_country", models.CharField(max_length=2)),
                ("destination_city", models.CharField(blank=True, max_length=120)),
                ("transport_modes", models.JSONField(default=list)),
                ("priority", models.CharField(choices=PRIORITY_CHOICES, default="STANDARD", max_length=16)),
                ("cargo_type", models.CharField(choices=CARGO_CHOICES, default="GENERAL", max_length=16)),
                ("total_weight", models.DecimalField(decimal_places=3, max_digits=12)),
                ("package_count", models.PositiveIntegerField()),
                ("packages", models.JSONField(default=list)),
                ("estimate_snapshot", models.JSONField(default=dict)),
                ("estimated_cost", models.DecimalField(decimal_places=2, max_digits=14)),
                ("currency", models.CharField(max_length=3)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                ("payment_method", models.CharField(blank=True, choices=PAYMENT_CHOICES, max_length=20, null=True)),
                ("rejection_reason", models.TextField(blank=True, default="")),
                ("cancellation_reason", models.TextField(blank=True, default="")),
                ("sent_at", models.DateTimeField(blank=True, null=True)),
                ("accepted_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("treatment_started_at", models.DateTimeField(blank=True, null=True)),
                ("validated_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("expired_at", models.DateTimeField(blank=True, null=True)),
                ("payment_received_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("agent", _user_fk("+")),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="quotes",
                        to="core.company",
                    ),
                ),
                ("created_by", _user_fk("quotes")),
                ("payment_received_by", _user_fk("+")),
            ],
            options={"ordering": ["-created_at"]},
        ),
        migrations.AddIndex(
            model_name="quote",
            index=models.Index(fields=["client", "-created_at"], name="quote_client_created_idx"),
        ),
        migrations.AddIndex(
            model_name="quote",
            index=models.Index(fields=["status", "valid_until"], name="quote_status_valid_idx"),
        ),
        migrations.CreateModel(
            name="QuoteLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_type", models.CharField(max_length=40)),
                ("old_status", models.CharField(blank=True, max_length=32, null=True)),
                ("new_status", models.CharField(blank=True, max_length=32, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("metadata", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("changed_by", _user_fk("+")),
                (
                    "quote",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="logs",
                        to="quotes.quote",
                    ),
                ),
            ],
            options={"ordering": ["created_at", "id"], "abstract": False},
        ),
        migrations.AddIndex(
            model_name="quotelog",
            index=models.Index(fields=["quote", "created_at"], name="quotelog_quote_created_idx"),
        ),
    ]
