# clinic_core/common/scoping.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet
from rest_framework.exceptions import ValidationError

from clinic_core.iam.permissions import Actor
from clinic_core.iam.roles import SystemRole
from clinic_core.units.models import Unit


def scope_to_actor(
    qs: QuerySet,
    actor: Actor,
    *,
    organization_id: UUID | None = None,
    unit_id: UUID | None = None,
) -> QuerySet:
    """
    Narrow a UnitScopedModel queryset to what `actor` may list.

    super_admin: optional organization/unit filters only.
    admin:       own organization, optional unit filter.
    user:        own organization; own unit when the account has one.
    """
    if actor.system_role == SystemRole.SUPER_ADMIN:
        if organization_id:
            qs = qs.filter(organization_id=organization_id)
        if unit_id:
            qs = qs.filter(unit_id=unit_id)
        return qs

    qs = qs.filter(organization_id=actor.organization_id)
    if actor.system_role == SystemRole.USER and actor.unit_id:
        return qs.filter(unit_id=actor.unit_id)
    if unit_id:
        qs = qs.filter(unit_id=unit_id)
    return qs


def resolve_unit(unit_id: UUID | None) -> Unit:
    """
    Unit a new clinical record is filed under; its organization comes with it.
    """
    if not unit_id:
        raise ValidationError({"unit_id": "This field is required."})
    unit = Unit.objects.filter(id=unit_id).first()
    if unit is None:
        raise ValidationError({"unit_id": "Unit not found."})
    return unit
