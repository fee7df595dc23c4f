# clinic_core/units/selectors.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from django.db.models import QuerySet

from clinic_core.units.models import Unit


def units_for_organization(*, organization_id: UUID) -> QuerySet[Unit]:
    return Unit.objects.filter(organization_id=organization_id).order_by("name")


def get_unit_or_none(*, unit_id: UUID | None, organization_id: UUID | None = None) -> Optional[Unit]:
    if not unit_id:
        return None
    qs = Unit.objects.filter(id=unit_id)
    if organization_id:
        qs = qs.filter(organization_id=organization_id)
    return qs.first()


def units_visible_to(actor, *, organization_id: UUID | None = None) -> QuerySet[Unit]:
    """
    super_admin: every unit, optionally narrowed to one organization.
    admin: units of its organization.
    user: its own unit only (none when it has no unit).
    """
    from clinic_core.iam.roles import SystemRole

    if actor.system_role == SystemRole.SUPER_ADMIN:
        qs = Unit.objects.all()
        if organization_id:
            qs = qs.filter(organization_id=organization_id)
        return qs.order_by("name")

    if actor.system_role == SystemRole.ADMIN:
        return units_for_organization(organization_id=actor.organization_id)

    if actor.unit_id:
        return Unit.objects.filter(id=actor.unit_id, organization_id=actor.organization_id)
    return Unit.objects.none()
