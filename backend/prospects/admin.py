from django.contrib import admin

from .models import Prospect


@admin.register(Prospect)
class ProspectAdmin(admin.ModelAdmin):
    list_display = ("email", "name", "phone", "company_name", "status", "invitation_expires_at", "converted_user", "created_at")
    search_fields = ("email", "name", "phone", "company_name")
    list_filter = ("status",)
    readonly_fields = ("invitation_token", "converted_user", "converted_at", "created_at")
