# clinic_core/patients/admin.py
from django.contrib import admin

from clinic_core.patients.models import Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ("name", "phone", "organization_id", "unit_id", "created_at")
    list_filter = ("gender",)
    search_fields = ("name", "phone", "email", "cpf")
    ordering = ("name",)
