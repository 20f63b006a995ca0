from django.core.management.base import BaseCommand

from quotes.services import expire_overdue_quotes


class Command(BaseCommand):
    help = "Expire sent quotes whose validity date has passed."

    def handle(self, *args, **options):
        count = expire_overdue_quotes()
        if count:
            self.stdout.write(self.style.SUCCESS(f"Expired {count} quote(s)."))
        else:
            self.stdout.write("No overdue quotes.")
