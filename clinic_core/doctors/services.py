# clinic_core/doctors/services.py
from __future__ import annotations

from uuid import UUID

from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.doctors.models import Doctor
from clinic_core.iam.models import Account
from clinic_core.units.models import Unit

CRM_TAKEN = "A doctor with this CRM already exists in this organization."


def _validate_account(account_id: UUID | None, organization_id: UUID) -> Account | None:
    if not account_id:
        return None
    account = Account.objects.filter(id=account_id, organization_id=organization_id).first()
    if account is None:
        raise ValidationError({"account_id": "Account not found in this organization."})
    return account


class DoctorService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor_user_id: int | None,
        unit: Unit,
        name: str,
        crm: str,
        email: str = "",
        phone: str = "",
        specialties: list | None = None,
        work_schedule: list | None = None,
        account_id: UUID | None = None,
    ) -> Doctor:
        account = _validate_account(account_id, unit.organization_id)
        try:
            with transaction.atomic():
                doctor = Doctor.objects.create(
                    organization_id=unit.organization_id,
                    unit_id=unit.id,
                    account=account,
                    name=name,
                    crm=crm,
                    email=email or "",
                    phone=phone or "",
                    specialties=list(specialties or []),
                    work_schedule=list(work_schedule or []),
                )
        except IntegrityError:
            raise ValidationError({"crm": CRM_TAKEN})

        AuditService.log(
            event_code="doctor.created",
            entity_type="Doctor",
            entity_id=doctor.id,
            organization_id=doctor.organization_id,
            unit_id=doctor.unit_id,
            actor_user_id=actor_user_id,
            metadata={"crm": crm},
        )
        return doctor

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, doctor_id: UUID, data: dict) -> Doctor:
        doctor = Doctor.objects.select_for_update().filter(id=doctor_id).first()
        if doctor is None:
            raise NotFound("Doctor not found")

        allowed = {"name", "email", "phone", "crm", "specialties", "work_schedule", "is_active"}
        updates = {k: v for k, v in (data or {}).items() if k in allowed}

        if "account_id" in (data or {}):
            doctor.account = _validate_account(data["account_id"], doctor.organization_id)
            updates["account_id"] = data["account_id"]

        for k, v in updates.items():
            if k != "account_id":
                setattr(doctor, k, v)

        try:
            with transaction.atomic():
                doctor.save()
        except IntegrityError:
            raise ValidationError({"crm": CRM_TAKEN})

        AuditService.log(
            event_code="doctor.updated",
            entity_type="Doctor",
            entity_id=doctor.id,
            organization_id=doctor.organization_id,
            unit_id=doctor.unit_id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(updates.keys())},
        )
        return doctor

    @staticmethod
    @transaction.atomic
    def delete(*, actor_user_id: int | None, doctor_id: UUID) -> None:
        doctor = Doctor.objects.select_for_update().filter(id=doctor_id).first()
        if doctor is None:
            raise NotFound("Doctor not found")

        if doctor.appointments.exists():
            raise ValidationError({"detail": "Doctor has appointments. Deactivate the doctor instead."})

        AuditService.log(
            event_code="doctor.deleted",
            entity_type="Doctor",
            entity_id=doctor.id,
            organization_id=doctor.organization_id,
            unit_id=doctor.unit_id,
            actor_user_id=actor_user_id,
            metadata={"crm": doctor.crm},
        )
        doctor.delete()
