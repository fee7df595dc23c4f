# clinic_core/iam/services/profiles.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.common.api.exceptions import Forbidden
from clinic_core.iam.models import Account, Profile
from clinic_core.iam.permissions import Actor, same_id
from clinic_core.iam.roles import SystemRole
from clinic_core.organizations.models import Organization
from clinic_core.units.models import Unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileUpdate:
    name: Optional[str] = None
    description: Optional[str] = None
    permissions: Optional[list] = None
    unit_id: Optional[UUID] = None
    clear_unit: bool = False


def _require_admin(actor: Actor, verb: str) -> None:
    if actor.system_role not in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
        raise Forbidden(f"Only admins can {verb} profiles")


def _validate_unit(unit_id: UUID | None, organization_id) -> Unit | None:
    if not unit_id:
        return None
    unit = Unit.objects.filter(id=unit_id, organization_id=organization_id).first()
    if unit is None:
        raise ValidationError({"unit_id": "Unit not found in this organization."})
    return unit


def _get_profile_for_update(profile_id: UUID) -> Profile:
    profile = Profile.objects.select_for_update().filter(id=profile_id).first()
    if profile is None:
        raise NotFound("Profile not found")
    return profile


class ProfileService:
    """
    Profile writes. Authorization rules live here because they are part of
    the profile contract itself:
      - `user` accounts can never write profiles;
      - admins only within their own organization.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        organization_id: UUID,
        name: str,
        permissions: list,
        description: str = "",
        unit_id: UUID | None = None,
    ) -> Profile:
        _require_admin(actor, "create")

        if actor.system_role == SystemRole.ADMIN and not same_id(actor.organization_id, organization_id):
            raise Forbidden("Cannot create profile in different organization")

        if not Organization.objects.filter(id=organization_id).exists():
            raise NotFound("Organization not found")

        unit = _validate_unit(unit_id, organization_id)

        profile = Profile.objects.create(
            name=name,
            description=description or "",
            system_role=SystemRole.USER,
            organization_id=organization_id,
            unit=unit,
            permissions=list(permissions or []),
        )

        AuditService.log(
            event_code="profile.created",
            entity_type="Profile",
            entity_id=profile.id,
            organization_id=organization_id,
            unit_id=profile.unit_id,
            actor_user_id=actor.user_id,
            metadata={"permissions": len(profile.permissions)},
        )
        logger.info("Profile %s created in organization %s by actor %s", profile.id, organization_id, actor.id)
        return profile

    @staticmethod
    @transaction.atomic
    def update(*, actor: Actor, profile_id: UUID, patch: ProfileUpdate) -> Profile:
        _require_admin(actor, "update")
        profile = _get_profile_for_update(profile_id)

        if actor.system_role == SystemRole.ADMIN and not same_id(profile.organization_id, actor.organization_id):
            raise Forbidden("Cannot update profile from different organization")

        changed = []
        if patch.name is not None:
            profile.name = patch.name
            changed.append("name")
        if patch.description is not None:
            profile.description = patch.description
            changed.append("description")
        if patch.permissions is not None:
            profile.permissions = list(patch.permissions)
            changed.append("permissions")
        if patch.clear_unit:
            profile.unit = None
            changed.append("unit")
        elif patch.unit_id is not None:
            profile.unit = _validate_unit(patch.unit_id, profile.organization_id)
            changed.append("unit")

        profile.save()

        AuditService.log(
            event_code="profile.updated",
            entity_type="Profile",
            entity_id=profile.id,
            organization_id=profile.organization_id,
            unit_id=profile.unit_id,
            actor_user_id=actor.user_id,
            metadata={"updated_fields": sorted(changed)},
        )
        logger.info("Profile %s updated by actor %s (%s)", profile.id, actor.id, ", ".join(sorted(changed)))
        return profile

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, profile_id: UUID) -> int:
        """
        Delete a profile. Accounts that referenced it lose their profile
        (and fall back to the dashboard-only permissions). Returns the number
        of accounts that were disassociated.
        """
        _require_admin(actor, "delete")
        profile = _get_profile_for_update(profile_id)

        if actor.system_role == SystemRole.ADMIN and not same_id(profile.organization_id, actor.organization_id):
            raise Forbidden("Cannot delete profile from different organization")

        detached = Account.objects.filter(profile_id=profile.id).update(profile=None)

        AuditService.log(
            event_code="profile.deleted",
            entity_type="Profile",
            entity_id=profile.id,
            organization_id=profile.organization_id,
            unit_id=profile.unit_id,
            actor_user_id=actor.user_id,
            metadata={"name": profile.name, "detached_accounts": detached},
        )
        profile.delete()
        logger.info("Profile %s deleted by actor %s; %s account(s) detached", profile_id, actor.id, detached)
        return detached
