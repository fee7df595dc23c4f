# clinic_core/doctors/admin.py
from django.contrib import admin

from clinic_core.doctors.models import Doctor


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ("name", "crm", "organization_id", "unit_id", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "crm", "email")
    ordering = ("name",)
