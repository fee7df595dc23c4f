# clinic_core/iam/roles.py
from __future__ import annotations

from django.db import models

from clinic_core.iam.statements import CRUD, STATEMENTS


class SystemRole(models.TextChoices):
    SUPER_ADMIN = "super_admin", "Super admin"
    ADMIN = "admin", "Admin"
    USER = "user", "User"


ROLE_LEVELS: dict[str, int] = {
    SystemRole.USER: 1,
    SystemRole.ADMIN: 2,
    SystemRole.SUPER_ADMIN: 3,
}

# Static bundles per role. The evaluator grants admin and super_admin
# everything; these bundles describe the roles to clients.
ROLE_STATEMENTS: dict[str, dict[str, tuple[str, ...]]] = {
    SystemRole.SUPER_ADMIN: dict(STATEMENTS),
    SystemRole.ADMIN: {**STATEMENTS, "organization": ("read", "update")},
    SystemRole.USER: {"dashboard": ("read",)},
}

ROLE_SUMMARIES: dict[str, tuple[str, ...]] = {
    SystemRole.SUPER_ADMIN: (
        "Full system access",
        "Can manage all organizations",
        "Can assign any role",
    ),
    SystemRole.ADMIN: (
        "Organization-level access",
        "Can manage organization users",
        "Can create and manage profiles",
        "Can assign user roles",
    ),
    SystemRole.USER: (
        "Profile-based permissions",
        "Access defined by admin",
    ),
}


def role_level(role) -> int:
    return ROLE_LEVELS.get(role, 0)


def has_required_role(actor, required_role) -> bool:
    """
    True when the actor's role is at least `required_role` in the
    user < admin < super_admin hierarchy.
    """
    if actor is None:
        return False
    required = ROLE_LEVELS.get(required_role)
    if required is None:
        return False
    return role_level(actor.system_role) >= required


def role_summary(role) -> list[str]:
    return list(ROLE_SUMMARIES.get(role, ()))


def describe_roles() -> list[dict]:
    out = []
    for role in SystemRole:
        out.append(
            {
                "role": role.value,
                "label": role.label,
                "level": ROLE_LEVELS[role],
                "statements": {k: list(v) for k, v in ROLE_STATEMENTS[role].items()},
                "summary": role_summary(role),
            }
        )
    return out


__all__ = [
    "CRUD",
    "ROLE_LEVELS",
    "ROLE_STATEMENTS",
    "SystemRole",
    "describe_roles",
    "has_required_role",
    "role_level",
    "role_summary",
]
