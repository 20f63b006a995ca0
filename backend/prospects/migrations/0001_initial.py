import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import prospects.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Prospect",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("phone", models.CharField(blank=True, max_length=32)),
                ("name", models.CharField(blank=True, max_length=120)),
                ("company_name", models.CharField(blank=True, max_length=255)),
                ("invitation_token", models.CharField(default=prospects.models.new_token, max_length=64, unique=True)),
                ("invitation_expires_at", models.DateTimeField()),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("CONVERTED", "Converted"), ("EXPIRED", "Expired")],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("converted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "converted_user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={"ordering": ["-created_at"]},
        ),
    ]
