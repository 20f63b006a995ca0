from django.contrib import admin

from core.admin import StatusLogInline
from .models import PickupLog, PickupRequest


class PickupLogInline(StatusLogInline):
    model = PickupLog


@admin.register(PickupRequest)
class PickupRequestAdmin(admin.ModelAdmin):
    list_display = ("tracking_number", "status", "contact_email", "pickup_city", "requested_date", "time_slot", "scheduled_date", "is_attached_to_account")
    search_fields = ("tracking_number", "contact_email", "contact_phone", "contact_name")
    list_filter = ("status", "time_slot", "is_attached_to_account")
    date_hierarchy = "requested_date"
    readonly_fields = ("tracking_number", "tracking_token", "status", "created_by", "client", "prospect", "created_at", "updated_at")
    inlines = [PickupLogInline]

    def has_add_permission(self, request):
        return False
