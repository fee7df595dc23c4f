# clinic_core/appointments/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.appointments.models import STATUS_TRANSITIONS, Appointment, AppointmentStatus
from clinic_core.appointments.selectors import overlapping_appointments
from clinic_core.audit.services import AuditService
from clinic_core.doctors.models import Doctor
from clinic_core.patients.models import Patient
from clinic_core.units.models import Unit

logger = logging.getLogger(__name__)

DEFAULT_DURATION_MINUTES = 30


@dataclass(frozen=True)
class AppointmentUpdate:
    doctor_id: Optional[UUID] = None
    patient_id: Optional[UUID] = None
    clear_patient: bool = False
    patient_name: Optional[str] = None
    patient_phone: Optional[str] = None
    date_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None


def _doctor_in_unit(doctor_id: UUID, unit_id: UUID, *, require_active: bool = True) -> Doctor:
    doctor = Doctor.objects.filter(id=doctor_id, unit_id=unit_id).first()
    if doctor is None:
        raise ValidationError({"doctor_id": "Doctor not found in this unit."})
    if require_active and not doctor.is_active:
        raise ValidationError({"doctor_id": "Doctor is not active."})
    return doctor


def _patient_in_unit(patient_id: UUID, unit_id: UUID) -> Patient:
    patient = Patient.objects.filter(id=patient_id, unit_id=unit_id).first()
    if patient is None:
        raise ValidationError({"patient_id": "Patient not found in this unit."})
    return patient


def _ensure_slot_free(*, doctor_id: UUID, date_time: datetime, duration_minutes: int, exclude_id=None) -> None:
    if overlapping_appointments(
        doctor_id=doctor_id,
        date_time=date_time,
        duration_minutes=duration_minutes,
        exclude_id=exclude_id,
    ).exists():
        raise ValidationError({"date_time": "The doctor already has an appointment at this time."})


def _audit(event_code: str, appt: Appointment, actor_user_id, metadata: dict | None = None) -> None:
    AuditService.log(
        event_code=event_code,
        entity_type="Appointment",
        entity_id=appt.id,
        organization_id=appt.organization_id,
        unit_id=appt.unit_id,
        actor_user_id=actor_user_id,
        metadata=metadata or {},
    )


class AppointmentService:
    """
    Booking rules:
      - the doctor belongs to the appointment's unit and is active,
      - a linked patient is registered in that same unit,
      - a doctor never has two active (non-cancelled) appointments overlapping,
      - status moves only along STATUS_TRANSITIONS.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor_user_id: int | None,
        unit: Unit,
        doctor_id: UUID,
        date_time: datetime,
        patient_id: UUID | None = None,
        patient_name: str = "",
        patient_phone: str = "",
        duration_minutes: int = DEFAULT_DURATION_MINUTES,
        notes: str = "",
    ) -> Appointment:
        doctor = _doctor_in_unit(doctor_id, unit.id)

        patient = None
        if patient_id:
            patient = _patient_in_unit(patient_id, unit.id)
            patient_name = patient_name or patient.name
            patient_phone = patient_phone or patient.phone

        if not patient_name:
            raise ValidationError({"patient_name": "Patient name is required when no patient is linked."})

        # serialize bookings per doctor
        Doctor.objects.select_for_update().filter(id=doctor.id).first()
        _ensure_slot_free(doctor_id=doctor.id, date_time=date_time, duration_minutes=duration_minutes)

        appt = Appointment.objects.create(
            organization_id=unit.organization_id,
            unit_id=unit.id,
            doctor=doctor,
            patient=patient,
            patient_name=patient_name,
            patient_phone=patient_phone or "",
            date_time=date_time,
            duration_minutes=duration_minutes,
            notes=notes or "",
        )
        _audit("appointment.created", appt, actor_user_id, {"doctor_id": str(doctor.id)})
        return appt

    @staticmethod
    @transaction.atomic
    def create_anonymous(
        *,
        unit: Unit,
        doctor_id: UUID,
        date_time: datetime,
        patient_name: str,
        patient_phone: str,
        notes: str = "",
    ) -> Appointment:
        appt = AppointmentService.create(
            actor_user_id=None,
            unit=unit,
            doctor_id=doctor_id,
            date_time=date_time,
            patient_name=patient_name,
            patient_phone=patient_phone,
            notes=notes,
        )
        logger.info("Public booking %s created for unit %s", appt.id, unit.id)
        return appt

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, appointment_id: UUID, patch: AppointmentUpdate) -> Appointment:
        appt = Appointment.objects.select_for_update().filter(id=appointment_id).first()
        if appt is None:
            raise NotFound("Appointment not found")

        if appt.status in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED):
            raise ValidationError({"status": f"Cannot edit a {appt.status} appointment."})

        if patch.doctor_id is not None:
            appt.doctor = _doctor_in_unit(patch.doctor_id, appt.unit_id)
        if patch.clear_patient:
            appt.patient = None
        elif patch.patient_id is not None:
            appt.patient = _patient_in_unit(patch.patient_id, appt.unit_id)
        if patch.patient_name is not None:
            appt.patient_name = patch.patient_name
        if patch.patient_phone is not None:
            appt.patient_phone = patch.patient_phone
        if patch.date_time is not None:
            appt.date_time = patch.date_time
        if patch.duration_minutes is not None:
            appt.duration_minutes = patch.duration_minutes
        if patch.notes is not None:
            appt.notes = patch.notes

        if patch.doctor_id is not None or patch.date_time is not None or patch.duration_minutes is not None:
            _ensure_slot_free(
                doctor_id=appt.doctor_id,
                date_time=appt.date_time,
                duration_minutes=appt.duration_minutes,
                exclude_id=appt.id,
            )

        appt.save()
        _audit("appointment.updated", appt, actor_user_id)
        return appt

    @staticmethod
    @transaction.atomic
    def set_status(*, actor_user_id: int | None, appointment_id: UUID, status: str) -> Appointment:
        appt = Appointment.objects.select_for_update().filter(id=appointment_id).first()
        if appt is None:
            raise NotFound("Appointment not found")

        if status == appt.status:
            return appt

        if status not in STATUS_TRANSITIONS.get(appt.status, frozenset()):
            raise ValidationError({"status": f"Cannot move appointment from {appt.status} to {status}."})

        previous = appt.status
        appt.status = status
        appt.save(update_fields=["status", "updated_at"])

        _audit("appointment.status_changed", appt, actor_user_id, {"from": previous, "to": status})
        return appt

    @staticmethod
    @transaction.atomic
    def delete(*, actor_user_id: int | None, appointment_id: UUID) -> None:
        appt = Appointment.objects.select_for_update().filter(id=appointment_id).first()
        if appt is None:
            raise NotFound("Appointment not found")

        _audit("appointment.deleted", appt, actor_user_id, {"status": appt.status})
        appt.delete()
