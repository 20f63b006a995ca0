from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    model = CustomUser
    list_display = ['username', 'email', 'role', 'company', 'is_active']
    list_filter = ['role', 'is_active']
    search_fields = ['username', 'email', 'phone', 'company__name']
    fieldsets = UserAdmin.fieldsets + (
        ('Freight desk', {'fields': ('role', 'company', 'phone')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('Freight desk', {'fields': ('role', 'company', 'phone')}),
    )
