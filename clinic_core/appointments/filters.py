# clinic_core/appointments/filters.py
from __future__ import annotations

import django_filters

from clinic_core.appointments.models import Appointment, AppointmentStatus


class AppointmentFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=AppointmentStatus.choices)
    doctor = django_filters.UUIDFilter(field_name="doctor_id")
    patient = django_filters.UUIDFilter(field_name="patient_id")
    date_from = django_filters.IsoDateTimeFilter(field_name="date_time", lookup_expr="gte")
    date_to = django_filters.IsoDateTimeFilter(field_name="date_time", lookup_expr="lte")

    class Meta:
        model = Appointment
        fields = ["status", "doctor", "patient", "date_from", "date_to"]
