# clinic_core/doctors/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import Q, QuerySet

from clinic_core.common.scoping import scope_to_actor
from clinic_core.doctors.models import Doctor


def get_doctor_or_none(*, doctor_id: UUID) -> Doctor | None:
    return Doctor.objects.filter(id=doctor_id).first()


def doctors_visible_to(
    actor,
    *,
    organization_id: UUID | None = None,
    unit_id: UUID | None = None,
    q: str | None = None,
    active_only: bool = False,
) -> QuerySet[Doctor]:
    qs = scope_to_actor(Doctor.objects.all(), actor, organization_id=organization_id, unit_id=unit_id)

    qv = (q or "").strip()
    if qv:
        qs = qs.filter(Q(name__icontains=qv) | Q(crm__icontains=qv) | Q(email__icontains=qv))
    if active_only:
        qs = qs.filter(is_active=True)

    return qs.order_by("name")
