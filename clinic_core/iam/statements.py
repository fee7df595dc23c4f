# clinic_core/iam/statements.py
"""
Static catalog of access-controlled resources.

STATEMENTS lists, per resource, every action a permission entry may grant.
DEFAULT_PERMISSIONS is the catalog offered when composing profiles and the
effective list reported for admin and super_admin accounts.
"""
from __future__ import annotations

from django.db import models


class Action(models.TextChoices):
    CREATE = "create", "Create"
    READ = "read", "Read"
    UPDATE = "update", "Update"
    DELETE = "delete", "Delete"


class PermissionScope(models.TextChoices):
    ORGANIZATION = "organization", "Organization"
    UNIT = "unit", "Unit"
    SELF = "self", "Self"


# registry-only action (never evaluated)
IMPERSONATE = "impersonate"

WILDCARD_RESOURCE = "*"

CRUD = ("create", "read", "update", "delete")

STATEMENTS: dict[str, tuple[str, ...]] = {
    "organization": CRUD,
    "unit": CRUD,
    "user": ("read", "create", "update", "delete", IMPERSONATE),
    "appointment": CRUD,
    "patient": CRUD,
    "medical_record": CRUD,
    "prescription": CRUD,
    "schedule": CRUD,
    "report": CRUD,
    "dashboard": ("read",),
    "profile": CRUD,
    "doctor": CRUD,
}

RESOURCES = tuple(STATEMENTS)


DEFAULT_PERMISSIONS: list[dict] = [
    {"resource": "dashboard", "actions": ["read"], "scope": PermissionScope.ORGANIZATION.value},
    {"resource": "organization", "actions": ["read", "update"], "scope": PermissionScope.ORGANIZATION.value},
    {"resource": "unit", "actions": list(CRUD), "scope": PermissionScope.ORGANIZATION.value},
    {"resource": "user", "actions": list(CRUD), "scope": PermissionScope.ORGANIZATION.value},
    {"resource": "patient", "actions": list(CRUD), "scope": PermissionScope.UNIT.value},
    {"resource": "appointment", "actions": list(CRUD), "scope": PermissionScope.UNIT.value},
    {"resource": "schedule", "actions": ["read", "update"], "scope": PermissionScope.UNIT.value},
    {"resource": "prescription", "actions": list(CRUD), "scope": PermissionScope.UNIT.value},
    {"resource": "medical_record", "actions": list(CRUD), "scope": PermissionScope.UNIT.value},
    {"resource": "doctor", "actions": list(CRUD), "scope": PermissionScope.UNIT.value},
    {"resource": "report", "actions": ["read"], "scope": PermissionScope.ORGANIZATION.value},
    {"resource": "profile", "actions": list(CRUD), "scope": PermissionScope.ORGANIZATION.value},
]

# Granted to a `user` account that has no profile, so nobody is fully locked out.
FALLBACK_PERMISSIONS: list[dict] = [
    {"resource": "dashboard", "actions": ["read"], "scope": PermissionScope.ORGANIZATION.value},
]


def allowed_actions_for(resource: str) -> tuple[str, ...]:
    if resource == WILDCARD_RESOURCE:
        return CRUD
    return STATEMENTS.get(resource, ())


def permission_entry_errors(entry: dict) -> list[str]:
    """
    Validate one {resource, actions, scope?} entry against the registry.
    Returns a list of human readable problems (empty when valid).
    """
    errors: list[str] = []
    resource = entry.get("resource")
    actions = entry.get("actions") or []
    scope = entry.get("scope")

    if resource != WILDCARD_RESOURCE and resource not in STATEMENTS:
        errors.append(f"Unknown resource '{resource}'.")
        return errors

    if not actions:
        errors.append("At least one action is required.")

    allowed = set(allowed_actions_for(resource))
    unknown = [a for a in actions if a not in allowed]
    if unknown:
        errors.append(f"Actions {unknown} are not valid for resource '{resource}'.")

    if scope is not None and scope not in PermissionScope.values:
        errors.append(f"Invalid scope '{scope}'.")

    return errors
