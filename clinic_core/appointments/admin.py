# clinic_core/appointments/admin.py
from django.contrib import admin

from clinic_core.appointments.models import Appointment


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ("patient_name", "doctor", "date_time", "status", "unit_id")
    list_filter = ("status",)
    search_fields = ("patient_name", "patient_phone")
    ordering = ("-date_time",)
    raw_id_fields = ("doctor", "patient")
