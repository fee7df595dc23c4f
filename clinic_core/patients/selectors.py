# clinic_core/patients/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from clinic_core.common.scoping import scope_to_actor
from clinic_core.patients.models import Patient


def get_patient_or_none(*, patient_id: UUID) -> Patient | None:
    return Patient.objects.filter(id=patient_id).first()


def patients_visible_to(
    actor,
    *,
    organization_id: UUID | None = None,
    unit_id: UUID | None = None,
    q: str | None = None,
) -> QuerySet[Patient]:
    qs = scope_to_actor(Patient.objects.all(), actor, organization_id=organization_id, unit_id=unit_id)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(
            Q(name__icontains=qv)
            | Q(phone__icontains=qv)
            | Q(email__icontains=qv)
            | Q(cpf__icontains=qv)
        )

    return qs.order_by("name", "-created_at")
