# clinic_core/iam/admin.py
from __future__ import annotations

from django.contrib import admin

from clinic_core.iam.models import Account, Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("name", "organization", "unit", "updated_at")
    list_filter = ("organization",)
    search_fields = ("name", "description")
    autocomplete_fields = ("organization", "unit")
    ordering = ("organization", "name")


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("full_name", "user", "system_role", "organization", "unit", "profile", "is_active")
    list_filter = ("system_role", "is_active", "organization")
    search_fields = ("full_name", "user__username", "user__email")
    autocomplete_fields = ("user", "organization", "unit", "profile")
    ordering = ("organization", "full_name")
