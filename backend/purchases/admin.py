from django.contrib import admin

from core.admin import StatusLogInline
from .models import PurchaseLog, PurchaseRequest


class PurchaseLogInline(StatusLogInline):
    model = PurchaseLog


@admin.register(PurchaseRequest)
class PurchaseRequestAdmin(admin.ModelAdmin):
    list_display = ("tracking_number", "status", "product_name", "contact_email", "delivery_city", "delivery_mode", "total_cost", "is_attached_to_account")
    search_fields = ("tracking_number", "product_name", "contact_email", "contact_phone")
    list_filter = ("status", "delivery_mode", "is_attached_to_account")
    # costs and status change through the purchase services
    readonly_fields = (
        "tracking_number", "tracking_token", "status", "created_by", "client", "prospect",
        "actual_product_cost", "delivery_cost", "service_fee", "service_fee_is_manual", "total_cost",
        "created_at", "updated_at",
    )
    inlines = [PurchaseLogInline]

    def has_add_permission(self, request):
        return False
