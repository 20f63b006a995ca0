from django.contrib import admin

from core.admin import StatusLogInline
from .models import Quote, QuoteLog


class QuoteLogInline(StatusLogInline):
    model = QuoteLog


@admin.register(Quote)
class QuoteAdmin(admin.ModelAdmin):
    list_display = ("quote_number", "client", "status", "origin_country", "destination_country", "estimated_cost", "currency", "payment_method", "created_at")
    search_fields = ("quote_number", "client__name", "created_by__username")
    list_filter = ("status", "priority", "payment_method", "created_at")
    date_hierarchy = "created_at"
    inlines = [QuoteLogInline]

    def get_readonly_fields(self, request, obj=None):
        # status only moves through the workflow services
        return [f.name for f in obj._meta.fields] if obj else []

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
