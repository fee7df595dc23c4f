# clinic_core/patients/services.py
from __future__ import annotations

from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.patients.models import Patient
from clinic_core.units.models import Unit

CPF_TAKEN = "A patient with this CPF already exists in this organization."

UPDATABLE_FIELDS = {
    "name",
    "email",
    "phone",
    "date_of_birth",
    "gender",
    "cpf",
    "address",
    "emergency_contact",
}


class PatientService:
    @staticmethod
    @transaction.atomic
    def create(*, actor_user_id: int | None, unit: Unit, data: dict) -> Patient:
        fields = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        try:
            with transaction.atomic():
                patient = Patient.objects.create(
                    organization_id=unit.organization_id,
                    unit_id=unit.id,
                    **fields,
                )
        except IntegrityError:
            raise ValidationError({"cpf": CPF_TAKEN})

        AuditService.log(
            event_code="patient.created",
            entity_type="Patient",
            entity_id=patient.id,
            organization_id=patient.organization_id,
            unit_id=patient.unit_id,
            actor_user_id=actor_user_id,
            metadata={},
        )
        return patient

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, patient_id: UUID, data: dict) -> Patient:
        patient = Patient.objects.select_for_update().filter(id=patient_id).first()
        if patient is None:
            raise NotFound("Patient not found")

        updates = {k: v for k, v in (data or {}).items() if k in UPDATABLE_FIELDS}
        for k, v in updates.items():
            setattr(patient, k, v)

        try:
            with transaction.atomic():
                patient.save()
        except IntegrityError:
            raise ValidationError({"cpf": CPF_TAKEN})

        AuditService.log(
            event_code="patient.updated",
            entity_type="Patient",
            entity_id=patient.id,
            organization_id=patient.organization_id,
            unit_id=patient.unit_id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(updates.keys())},
        )
        return patient

    @staticmethod
    @transaction.atomic
    def delete(*, actor_user_id: int | None, patient_id: UUID) -> None:
        patient = Patient.objects.select_for_update().filter(id=patient_id).first()
        if patient is None:
            raise NotFound("Patient not found")

        AuditService.log(
            event_code="patient.deleted",
            entity_type="Patient",
            entity_id=patient.id,
            organization_id=patient.organization_id,
            unit_id=patient.unit_id,
            actor_user_id=actor_user_id,
            metadata={},
        )
        # appointments keep patient_name / patient_phone; the FK is SET_NULL
        patient.delete()
