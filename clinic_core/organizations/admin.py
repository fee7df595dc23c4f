# clinic_core/organizations/admin.py
from django.contrib import admin

from clinic_core.organizations.models import Organization


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "email", "parent", "created_at")
    search_fields = ("name", "slug", "email", "cnpj")
    autocomplete_fields = ("parent",)
    ordering = ("name",)
