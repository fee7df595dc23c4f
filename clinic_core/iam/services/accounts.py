# clinic_core/iam/services/accounts.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from clinic_core.audit.services import AuditService
from clinic_core.common.api.exceptions import Forbidden
from clinic_core.iam.models import Account, Profile
from clinic_core.iam.permissions import Actor, can_assign_role, same_id
from clinic_core.iam.roles import SystemRole
from clinic_core.organizations.models import Organization
from clinic_core.units.models import Unit

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class AccountUpdate:
    full_name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    system_role: Optional[str] = None
    organization_id: Optional[UUID] = None
    unit_id: Optional[UUID] = None
    clear_unit: bool = False
    profile_id: Optional[UUID] = None
    clear_profile: bool = False
    is_active: Optional[bool] = None

    def touches_privileges(self) -> bool:
        return any(
            [
                self.system_role is not None,
                self.organization_id is not None,
                self.profile_id is not None,
                self.clear_profile,
                self.unit_id is not None,
                self.clear_unit,
                self.is_active is not None,
            ]
        )


def _get_account_for_update(account_id: UUID) -> Account:
    account = Account.objects.select_for_update().select_related("user").filter(id=account_id).first()
    if account is None:
        raise NotFound("User not found")
    return account


def _resolve_placement(
    *,
    system_role: str,
    organization_id: UUID | None,
    unit_id: UUID | None,
    profile_id: UUID | None,
) -> tuple[Organization | None, Unit | None, Profile | None]:
    if system_role != SystemRole.SUPER_ADMIN and not organization_id:
        raise ValidationError({"organization_id": "Organization is required for this role."})

    organization = None
    if organization_id:
        organization = Organization.objects.filter(id=organization_id).first()
        if organization is None:
            raise NotFound("Organization not found")

    unit = None
    if unit_id:
        unit = Unit.objects.filter(id=unit_id, organization_id=organization_id).first()
        if unit is None:
            raise ValidationError({"unit_id": "Unit not found in this organization."})

    profile = None
    if profile_id:
        profile = Profile.objects.filter(id=profile_id, organization_id=organization_id).first()
        if profile is None:
            raise ValidationError({"profile_id": "Profile not found in this organization."})

    return organization, unit, profile


def _ensure_can_assign(actor: Actor, role: str, organization_id) -> None:
    decision = can_assign_role(actor, role, organization_id)
    if not decision.allowed:
        logger.info("Role assignment denied: actor=%s role=%s reason=%s", actor.id, role, decision.reason)
        raise Forbidden(decision.reason)


def _ensure_same_org(actor: Actor, account: Account, message: str) -> None:
    if actor.system_role == SystemRole.ADMIN and not same_id(account.organization_id, actor.organization_id):
        raise Forbidden(message)


class AccountService:
    """
    User account lifecycle. Every account is a Django auth user (username =
    email) plus an Account row carrying role and placement.
    """

    @staticmethod
    @transaction.atomic
    def create(
        *,
        actor: Actor,
        email: str,
        password: str,
        full_name: str,
        organization_id: UUID | None,
        system_role: str = SystemRole.USER,
        unit_id: UUID | None = None,
        profile_id: UUID | None = None,
    ) -> Account:
        if actor.system_role not in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
            raise Forbidden("Only admins can create users")

        if actor.system_role == SystemRole.ADMIN and not same_id(actor.organization_id, organization_id):
            raise Forbidden("Cannot create user in different organization")

        _ensure_can_assign(actor, system_role, organization_id)

        organization, unit, profile = _resolve_placement(
            system_role=system_role,
            organization_id=organization_id,
            unit_id=unit_id,
            profile_id=profile_id,
        )

        email = (email or "").strip().lower()
        if User.objects.filter(username=email).exists():
            raise ValidationError({"email": "A user with this email already exists."})

        user = User.objects.create_user(username=email, email=email, password=password)
        account = Account.objects.create(
            user=user,
            full_name=full_name,
            system_role=system_role,
            organization=organization,
            unit=unit,
            profile=profile,
        )

        if organization is not None:
            AuditService.log(
                event_code="account.created",
                entity_type="Account",
                entity_id=account.id,
                organization_id=organization.id,
                unit_id=account.unit_id,
                actor_user_id=actor.user_id,
                metadata={"system_role": system_role},
            )
        logger.info("Account %s (%s) created by actor %s", account.id, system_role, actor.id)
        return account

    @staticmethod
    @transaction.atomic
    def update(*, actor: Actor, account_id: UUID, patch: AccountUpdate) -> Account:
        account = _get_account_for_update(account_id)

        if actor.system_role == SystemRole.ADMIN:
            _ensure_same_org(actor, account, "Cannot update user from different organization")
        elif actor.system_role != SystemRole.SUPER_ADMIN:
            if not same_id(account.id, actor.id):
                raise Forbidden("Cannot update other users")
            if patch.touches_privileges():
                raise Forbidden("Cannot change your own role, organization or profile")

        new_role = patch.system_role if patch.system_role is not None else account.system_role
        new_org_id = patch.organization_id if patch.organization_id is not None else account.organization_id

        if patch.system_role is not None or patch.organization_id is not None:
            if actor.system_role != SystemRole.SUPER_ADMIN and patch.system_role is not None:
                # changing a privileged account's role counts as assigning it
                _ensure_can_assign(actor, account.system_role, account.organization_id)
            _ensure_can_assign(actor, new_role, new_org_id)

        org_changed = not same_id(new_org_id, account.organization_id)
        unit_id = None if patch.clear_unit else (patch.unit_id or (None if org_changed else account.unit_id))
        profile_id = None if patch.clear_profile else (patch.profile_id or (None if org_changed else account.profile_id))

        organization, unit, profile = _resolve_placement(
            system_role=new_role,
            organization_id=new_org_id,
            unit_id=unit_id,
            profile_id=profile_id,
        )

        account.system_role = new_role
        account.organization = organization
        account.unit = unit
        account.profile = profile
        if patch.full_name is not None:
            account.full_name = patch.full_name
        if patch.is_active is not None:
            account.is_active = patch.is_active
        account.save()

        user = account.user
        user_fields = []
        if patch.email is not None:
            email = patch.email.strip().lower()
            if User.objects.filter(username=email).exclude(pk=user.pk).exists():
                raise ValidationError({"email": "A user with this email already exists."})
            user.username = email
            user.email = email
            user_fields += ["username", "email"]
        if patch.password:
            user.set_password(patch.password)
            user_fields.append("password")
        if user_fields:
            user.save(update_fields=user_fields)

        if account.organization_id:
            AuditService.log(
                event_code="account.updated",
                entity_type="Account",
                entity_id=account.id,
                organization_id=account.organization_id,
                unit_id=account.unit_id,
                actor_user_id=actor.user_id,
                metadata={"system_role": account.system_role},
            )
        return account

    @staticmethod
    @transaction.atomic
    def delete(*, actor: Actor, account_id: UUID) -> None:
        account = _get_account_for_update(account_id)

        if actor.system_role == SystemRole.ADMIN:
            _ensure_same_org(actor, account, "Cannot delete user from different organization")
        elif actor.system_role != SystemRole.SUPER_ADMIN:
            raise Forbidden("Cannot delete users")

        if account.organization_id:
            AuditService.log(
                event_code="account.deleted",
                entity_type="Account",
                entity_id=account.id,
                organization_id=account.organization_id,
                unit_id=account.unit_id,
                actor_user_id=actor.user_id,
                metadata={"email": account.email},
            )

        # the account row goes with its auth user
        account.user.delete()
        logger.info("Account %s deleted by actor %s", account_id, actor.id)

    @staticmethod
    @transaction.atomic
    def assign_role(
        *,
        actor: Actor,
        account_id: UUID,
        system_role: str,
        profile_id: UUID | None = None,
    ) -> Account:
        account = _get_account_for_update(account_id)

        if actor.system_role == SystemRole.ADMIN:
            _ensure_same_org(actor, account, "Admin can only assign roles within their organization")
            # demoting another admin is also a privileged assignment
            _ensure_can_assign(actor, account.system_role, account.organization_id)

        _ensure_can_assign(actor, system_role, account.organization_id)

        _, _, profile = _resolve_placement(
            system_role=system_role,
            organization_id=account.organization_id,
            unit_id=None,
            profile_id=profile_id,
        )

        previous = account.system_role
        account.system_role = system_role
        if profile is not None:
            account.profile = profile
        elif system_role != SystemRole.USER:
            # profiles only apply to the user tier
            account.profile = None
        account.save(update_fields=["system_role", "profile", "updated_at"])

        if account.organization_id:
            AuditService.log(
                event_code="account.role_assigned",
                entity_type="Account",
                entity_id=account.id,
                organization_id=account.organization_id,
                unit_id=account.unit_id,
                actor_user_id=actor.user_id,
                metadata={"from": previous, "to": system_role},
            )
        logger.info("Account %s role %s -> %s by actor %s", account.id, previous, system_role, actor.id)
        return account
