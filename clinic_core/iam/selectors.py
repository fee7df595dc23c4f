# clinic_core/iam/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from clinic_core.iam.models import Account, Profile
from clinic_core.iam.permissions import Actor
from clinic_core.iam.roles import SystemRole


def profiles_visible_to(actor: Actor) -> QuerySet[Profile]:
    """
    super_admin: all profiles; admin: its organization's; anyone else: none
    (the API refuses them before getting here).
    """
    qs = Profile.objects.select_related("organization", "unit")
    if actor.system_role == SystemRole.SUPER_ADMIN:
        return qs.order_by("name")
    if actor.system_role == SystemRole.ADMIN:
        return qs.filter(organization_id=actor.organization_id).order_by("name")
    return qs.none()


def account_qs() -> QuerySet[Account]:
    return Account.objects.select_related("user", "organization", "unit", "profile")


def get_account_or_none(*, account_id: UUID) -> Account | None:
    return account_qs().filter(id=account_id).first()


def accounts_visible_to(actor: Actor, *, unit_id: UUID | None = None) -> QuerySet[Account]:
    """
    Account listing used by GET /users/:
      - admin: own organization, optionally one unit;
      - super_admin: everybody;
      - user: own organization (the view gates on the `user` resource first).
    The caller is always excluded.
    """
    qs = account_qs()
    if actor.system_role == SystemRole.ADMIN:
        qs = qs.filter(organization_id=actor.organization_id)
        if unit_id:
            qs = qs.filter(unit_id=unit_id)
    elif actor.system_role != SystemRole.SUPER_ADMIN:
        qs = qs.filter(organization_id=actor.organization_id)
        if unit_id:
            qs = qs.filter(unit_id=unit_id)

    return qs.exclude(id=actor.id).order_by("full_name", "user__email")


def accounts_for_organization(*, organization_id: UUID) -> QuerySet[Account]:
    return account_qs().filter(organization_id=organization_id).order_by("full_name")


def accounts_for_unit(*, unit_id: UUID) -> QuerySet[Account]:
    return account_qs().filter(unit_id=unit_id).order_by("full_name")
