# backend/core/management/commands/bootstrap_dev.py
import os

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import BaseCommand
from rest_framework.authtoken.models import Token

from accounts.models import UserRole
from pricing.models import PricingConfig


class Command(BaseCommand):
    help = "Idempotently ensure a dev admin, its DRF token and a pricing configuration exist; print the token."

    def handle(self, *args, **opts):
        User = get_user_model()
        username = os.getenv("DEV_ADMIN_USER", "admin")
        email = os.getenv("DEV_ADMIN_EMAIL", "admin@example.com")
        password = os.getenv("DEV_ADMIN_PASS", "ChangeMe123!")

        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": email, "is_staff": True, "is_superuser": True, "role": UserRole.ADMIN},
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.SUCCESS(f"Created admin '{username}'"))
        else:
            self.stdout.write(f"Admin '{username}' already exists")
            if user.role != UserRole.ADMIN:
                user.role = UserRole.ADMIN
                user.save(update_fields=["role"])
                self.stdout.write(self.style.WARNING(f"Promoted '{username}' to {UserRole.ADMIN}"))

        if not PricingConfig.objects.exists():
            call_command("seed_pricing_config", stdout=self.stdout)

        token, _ = Token.objects.get_or_create(user=user)
        self.stdout.write(self.style.SUCCESS(f"TOKEN: {token.key}"))
