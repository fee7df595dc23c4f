# clinic_core/units/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.organizations.models import Organization
from clinic_core.units.models import Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnitUpdate:
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    manager: Optional[str] = None
    specialties: Optional[list] = None
    address: Optional[dict] = None


class UnitService:
    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor_user_id: int | None,
        organization_id: UUID,
        name: str,
        phone: str = "",
        email: str = "",
        manager: str = "",
        specialties: Optional[list] = None,
        address: Optional[dict] = None,
    ) -> Unit:
        if not Organization.objects.filter(id=organization_id).exists():
            raise ValidationError({"organization_id": "Organization not found."})

        unit = Unit.objects.create(
            organization_id=organization_id,
            name=name,
            phone=phone or "",
            email=email or "",
            manager=manager or "",
            specialties=list(specialties or []),
            address=address or {},
        )

        AuditService.log(
            event_code="unit.created",
            entity_type="Unit",
            entity_id=unit.id,
            organization_id=organization_id,
            unit_id=unit.id,
            actor_user_id=actor_user_id,
        )
        return unit

    @staticmethod
    @transaction.atomic
    def update(*, actor_user_id: int | None, unit_id: UUID, patch: UnitUpdate) -> Unit:
        unit = Unit.objects.select_for_update().filter(id=unit_id).first()
        if unit is None:
            raise NotFound("Unit not found")

        mapping = {
            "name": patch.name,
            "phone": patch.phone,
            "email": patch.email,
            "manager": patch.manager,
            "specialties": patch.specialties,
            "address": patch.address,
        }
        changed = []
        for field, value in mapping.items():
            if value is not None:
                setattr(unit, field, value)
                changed.append(field)

        unit.save()

        AuditService.log(
            event_code="unit.updated",
            entity_type="Unit",
            entity_id=unit.id,
            organization_id=unit.organization_id,
            unit_id=unit.id,
            actor_user_id=actor_user_id,
            metadata={"updated_fields": sorted(changed)},
        )
        return unit

    @staticmethod
    @transaction.atomic
    def delete(*, actor_user_id: int | None, unit_id: UUID) -> None:
        from clinic_core.appointments.models import Appointment
        from clinic_core.doctors.models import Doctor
        from clinic_core.patients.models import Patient

        unit = Unit.objects.select_for_update().filter(id=unit_id).first()
        if unit is None:
            raise NotFound("Unit not found")

        # clinical rows reference units by plain UUID, so nothing cascades to them
        for model in (Doctor, Patient, Appointment):
            if model.objects.filter(unit_id=unit.id).exists():
                raise ValidationError({"detail": "Unit still has clinical records. Remove or move them first."})

        AuditService.log(
            event_code="unit.deleted",
            entity_type="Unit",
            entity_id=unit.id,
            organization_id=unit.organization_id,
            unit_id=unit.id,
            actor_user_id=actor_user_id,
            metadata={"name": unit.name},
        )
        unit.delete()
        logger.info("Unit %s deleted by user %s", unit_id, actor_user_id)
