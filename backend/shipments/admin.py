from django.contrib import admin

from .models import Shipment, TrackingEvent


class TrackingEventInline(admin.TabularInline):
    model = TrackingEvent
    extra = 0
    fields = ("timestamp", "status", "location", "description", "internal_notes", "recorded_by")
    readonly_fields = ("recorded_by",)


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ("tracking_number", "client", "status", "origin_country", "destination_country", "package_count", "created_at")
    search_fields = ("tracking_number", "client__name", "quote__quote_number")
    list_filter = ("status", "cargo_type", "created_at")
    readonly_fields = ("tracking_number", "quote", "created_by", "created_at", "updated_at")
    inlines = [TrackingEventInline]
