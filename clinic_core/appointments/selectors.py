# clinic_core/appointments/selectors.py
from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from clinic_core.appointments.filters import AppointmentFilter
from clinic_core.appointments.models import Appointment, AppointmentStatus
from clinic_core.common.scoping import scope_to_actor


def appointment_qs() -> QuerySet[Appointment]:
    return Appointment.objects.select_related("doctor", "patient")


def get_appointment_or_none(*, appointment_id: UUID) -> Appointment | None:
    return appointment_qs().filter(id=appointment_id).first()


def appointments_visible_to(
    actor,
    *,
    params=None,
    organization_id: UUID | None = None,
    unit_id: UUID | None = None,
) -> QuerySet[Appointment]:
    qs = scope_to_actor(appointment_qs(), actor, organization_id=organization_id, unit_id=unit_id)

    filterset = AppointmentFilter(data=params or {}, queryset=qs)
    if not filterset.is_valid():
        raise ValidationError(filterset.errors)

    return filterset.qs.order_by("date_time")


def overlapping_appointments(
    *,
    doctor_id: UUID,
    date_time: datetime,
    duration_minutes: int,
    exclude_id: UUID | None = None,
) -> QuerySet[Appointment]:
    """
    Active appointments of `doctor_id` whose window intersects
    [date_time, date_time + duration_minutes).
    """
    end = date_time + timedelta(minutes=duration_minutes)

    # bounded look-back: no appointment lasts longer than a day
    qs = Appointment.objects.filter(
        doctor_id=doctor_id,
        date_time__lt=end,
        date_time__gt=date_time - timedelta(days=1),
    ).exclude(status=AppointmentStatus.CANCELLED)
    if exclude_id:
        qs = qs.exclude(id=exclude_id)

    ids = [a.id for a in qs if a.date_time + timedelta(minutes=a.duration_minutes) > date_time]
    return Appointment.objects.filter(id__in=ids)
