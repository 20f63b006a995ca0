from django.apps import AppConfig


class PricingConfigApp(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "pricing"
