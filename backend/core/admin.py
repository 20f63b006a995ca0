from django.contrib import admin

from .models import Company, DailySequence


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class StatusLogInline(admin.TabularInline):
    extra = 0
    can_delete = False
    fields = ("created_at", "event_type", "old_status", "new_status", "changed_by", "notes")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "phone", "city", "country")
    search_fields = ("name", "email")
    list_filter = ("country",)


@admin.register(DailySequence)
class DailySequenceAdmin(ReadOnlyAdmin):
    list_display = ("prefix", "day", "last_value")
    list_filter = ("prefix",)
