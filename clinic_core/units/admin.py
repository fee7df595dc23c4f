# clinic_core/units/admin.py
from django.contrib import admin

from clinic_core.units.models import Unit


@admin.register(Unit)
class UnitAdmin(admin.ModelAdmin):
    list_display = ("name", "organization", "manager", "phone", "created_at")
    list_filter = ("organization",)
    search_fields = ("name", "manager", "email", "organization__name")
    autocomplete_fields = ("organization",)
    ordering = ("organization", "name")
