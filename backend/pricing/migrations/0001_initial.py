import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PricingConfig",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("default_rate_per_kg", models.DecimalField(decimal_places=4, max_digits=12)),
                ("default_rate_per_m3", models.DecimalField(decimal_places=4, max_digits=12)),
                ("volumetric_weight_ratios", models.JSONField(default=dict)),
                ("use_volumetric_weight_per_mode", models.JSONField(default=dict)),
                ("transport_multipliers", models.JSONField(default=dict)),
                ("cargo_type_surcharges", models.JSONField(default=dict)),
                ("priority_surcharges", models.JSONField(default=dict)),
                ("delivery_speeds_per_mode", models.JSONField(default=dict)),
                ("version", models.PositiveIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"verbose_name": "pricing configuration"},
        ),
        migrations.CreateModel(
            name="TransportRate",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("origin_country", models.CharField(max_length=2)),
                ("destination_country", models.CharField(max_length=2)),
                (
                    "transport_mode",
                    models.CharField(
                        choices=[("ROAD", "Road"), ("SEA", "Sea"), ("AIR", "Air"), ("RAIL", "Rail")],
                        max_length=8,
                    ),
                ),
                ("rate_per_kg", models.DecimalField(decimal_places=4, max_digits=12)),
                ("rate_per_m3", models.DecimalField(blank=True, decimal_places=4, max_digits=12, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"ordering": ["origin_country", "destination_country", "transport_mode"]},
        ),
        migrations.AddConstraint(
            model_name="transportrate",
            constraint=models.UniqueConstraint(
                fields=("origin_country", "destination_country", "transport_mode"),
                name="uniq_transport_rate_route_mode",
            ),
        ),
    ]
