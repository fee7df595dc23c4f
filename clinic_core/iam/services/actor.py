# clinic_core/iam/services/actor.py
from __future__ import annotations

import logging
from typing import Optional
from uuid import UUID

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError

from clinic_core.iam.models import Account, Profile
from clinic_core.iam.permissions import Actor, Permission
from clinic_core.iam.roles import SystemRole

logger = logging.getLogger(__name__)


def fetch_profile_permissions(profile_id: UUID | str | None) -> list[Permission]:
    """
    Single point read of a profile's permission list.

    Missing profile -> [].
    Database failure -> logged, [] (fail closed: the evaluator then denies).
    """
    if not profile_id:
        return []
    try:
        raw = Profile.objects.filter(id=profile_id).values_list("permissions", flat=True).first()
    except DatabaseError:
        logger.exception("Failed to load permissions for profile %s", profile_id)
        return []

    if not raw:
        return []
    return [Permission.from_dict(p) for p in raw if isinstance(p, dict)]


def actor_from_account(account: Account, *, permissions=None) -> Actor:
    user = account.user
    return Actor(
        id=account.id,
        user_id=user.pk,
        email=account.email,
        name=account.full_name or user.get_username(),
        system_role=account.system_role,
        organization_id=account.organization_id,
        unit_id=account.unit_id,
        profile_id=account.profile_id,
        permissions=tuple(permissions) if permissions is not None else None,
    )


def resolve_actor(user) -> Optional[Actor]:
    """
    Build the Actor for an authenticated Django user.

    - account present and active: actor from the account; `user` accounts with
      a profile get the profile permissions threaded in (read once here).
    - no account but Django superuser: super_admin actor with no organization.
    - anything else: None.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None

    try:
        account = user.account
    except ObjectDoesNotExist:
        account = None

    if account is None:
        if getattr(user, "is_superuser", False):
            return Actor(
                id=user.pk,
                user_id=user.pk,
                email=getattr(user, "email", "") or "",
                name=user.get_username(),
                system_role=SystemRole.SUPER_ADMIN,
            )
        return None

    if not account.is_active:
        return None

    permissions = None
    if account.system_role == SystemRole.USER and account.profile_id:
        permissions = fetch_profile_permissions(account.profile_id)

    return actor_from_account(account, permissions=permissions)


def get_request_actor(request) -> Optional[Actor]:
    """
    Actor of the current request, resolved at most once per request.

    The authentication class normally sets request.actor already; requests
    authenticated another way (session, forced auth in tests) resolve here.
    """
    actor = getattr(request, "actor", None)
    if actor is not None:
        return actor

    actor = resolve_actor(getattr(request, "user", None))
    if actor is not None:
        attach_actor(request, actor)
    return actor


def attach_actor(request, actor: Optional[Actor]) -> None:
    setattr(request, "actor", actor)
    # keep the underlying HttpRequest in sync for code holding the Django request
    django_request = getattr(request, "_request", None)
    if django_request is not None:
        setattr(django_request, "actor", actor)
