from django.contrib import admin

from .models import PricingConfig, TransportRate


@admin.register(PricingConfig)
class PricingConfigAdmin(admin.ModelAdmin):
    list_display = ("id", "version", "default_rate_per_kg", "default_rate_per_m3", "updated_by", "updated_at")
    readonly_fields = ("version", "updated_by", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TransportRate)
class TransportRateAdmin(admin.ModelAdmin):
    list_display = ("origin_country", "destination_country", "transport_mode", "rate_per_kg", "rate_per_m3", "is_active")
    list_filter = ("transport_mode", "is_active", "origin_country", "destination_country")
    search_fields = ("origin_country", "destination_country", "notes")
