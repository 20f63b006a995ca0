# backend/pricing/management/commands/seed_pricing_config.py

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from pricing.models import PricingConfig, TransportRate
from pricing.services.config_service import DEFAULT_CONFIG, validate_config_payload

#region -------- Sample route rates --------
SAMPLE_RATES = [
    # origin, destination, mode, per kg, per m3, notes
    ("FR", "BF", "AIR", Decimal("4.5000"), Decimal("650.0000"), "Paris CDG to Ouagadougou"),
    ("FR", "BF", "SEA", Decimal("0.3500"), Decimal("85.0000"), "Le Havre to Abidjan, road on-carriage"),
    ("CI", "BF", "ROAD", Decimal("0.4000"), Decimal("60.0000"), "Abidjan corridor"),
    ("CI", "BF", "RAIL", Decimal("0.3000"), Decimal("45.0000"), "Sitarail Abidjan to Ouagadougou"),
    ("BF", "FR", "AIR", Decimal("4.8000"), Decimal("700.0000"), "Ouagadougou to Paris CDG"),
]
#endregion


class Command(BaseCommand):
    help = "Idempotently create the pricing configuration and sample transport rates."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            default=False,
            help="Overwrite an existing configuration with the defaults (bumps the version).",
        )
        parser.add_argument(
            "--no-rates",
            action="store_true",
            default=False,
            help="Skip the sample transport rates.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        clean = validate_config_payload(DEFAULT_CONFIG, partial=False)
        config = PricingConfig.objects.filter(pk=PricingConfig.SINGLETON_ID).first()

        if config is None:
            PricingConfig(**clean, version=1).save()
            self.stdout.write(self.style.SUCCESS("Created pricing configuration v1"))
        elif options["reset"]:
            for name, value in clean.items():
                setattr(config, name, value)
            config.version += 1
            config.updated_by = None
            config.save()
            self.stdout.write(self.style.SUCCESS(f"Reset pricing configuration to defaults (v{config.version})"))
        else:
            self.stdout.write(f"Pricing configuration v{config.version} already exists")

        if options["no_rates"]:
            return

        created = 0
        for origin, destination, mode, per_kg, per_m3, notes in SAMPLE_RATES:
            _, was_created = TransportRate.objects.get_or_create(
                origin_country=origin,
                destination_country=destination,
                transport_mode=mode,
                defaults={"rate_per_kg": per_kg, "rate_per_m3": per_m3, "notes": notes},
            )
            created += int(was_created)
        self.stdout.write(self.style.SUCCESS(f"Transport rates: {created} created, {len(SAMPLE_RATES) - created} existing"))
