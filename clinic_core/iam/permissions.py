# clinic_core/iam/permissions.py
"""
Permission evaluator.

Everything in this module is pure: inputs are an Actor value (built once per
request by the authentication layer) plus optional targets, outputs are
PermissionCheckResult values. No database access, no exceptions.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from clinic_core.iam.roles import SystemRole
from clinic_core.iam.statements import (
    DEFAULT_PERMISSIONS,
    FALLBACK_PERMISSIONS,
    PermissionScope,
    WILDCARD_RESOURCE,
)

REASON_NOT_AUTHENTICATED = "User not authenticated"
REASON_DIFFERENT_ORGANIZATION = "Access denied to different organization"
REASON_INSUFFICIENT = "Insufficient permissions for this resource and action"
REASON_UNKNOWN_ROLE = "Unknown role"

REASON_ASSIGN_PRIVILEGED = "Admin cannot assign super_admin or admin roles"
REASON_ASSIGN_OTHER_ORG = "Admin can only assign roles within their organization"
REASON_ASSIGN_USER = "Regular users cannot assign roles"


@dataclass(frozen=True)
class Permission:
    resource: str
    actions: frozenset[str]
    scope: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "Permission":
        return cls(
            resource=str(data.get("resource") or ""),
            actions=frozenset(data.get("actions") or ()),
            scope=data.get("scope") or None,
        )

    def to_dict(self) -> dict:
        out: dict[str, Any] = {"resource": self.resource, "actions": sorted(self.actions)}
        if self.scope:
            out["scope"] = self.scope
        return out

    def matches(self, resource: str, action: str) -> bool:
        return (self.resource == resource or self.resource == WILDCARD_RESOURCE) and action in self.actions


@dataclass(frozen=True)
class Actor:
    """
    The authenticated principal as the evaluator sees it.

    `permissions` holds the resolved profile permissions for `user` accounts
    (None when they were never resolved).
    """
    id: Any
    system_role: str
    email: str = ""
    name: str = ""
    organization_id: Any = None
    unit_id: Any = None
    profile_id: Any = None
    permissions: Optional[tuple[Permission, ...]] = None
    # auth user pk, used for audit attribution
    user_id: Any = None


@dataclass(frozen=True)
class PermissionCheckResult:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = PermissionCheckResult(allowed=True)


def deny(reason: str) -> PermissionCheckResult:
    return PermissionCheckResult(allowed=False, reason=reason)


def same_id(a, b) -> bool:
    # UUIDs from the ORM and strings from URLs/JSON compare by text.
    if a is None or b is None:
        return a is None and b is None
    return str(a) == str(b)


def _as_permissions(items: Iterable[Any] | None) -> list[Permission]:
    out: list[Permission] = []
    for p in items or ():
        out.append(p if isinstance(p, Permission) else Permission.from_dict(p))
    return out


DEFAULT_PERMISSION_OBJECTS = tuple(_as_permissions(DEFAULT_PERMISSIONS))
FALLBACK_PERMISSION_OBJECTS = tuple(_as_permissions(FALLBACK_PERMISSIONS))


def get_user_permissions(actor: Optional[Actor], cached_permissions=None) -> list[Permission]:
    """
    Effective permission list for `actor`, in evaluation order.

    Order of sources:
      1) an explicitly supplied cache,
      2) the permissions resolved onto the actor,
      3) the default catalog for admin / super_admin,
      4) the dashboard fallback for a `user` without a profile.
    """
    if actor is None:
        return []
    if cached_permissions is not None:
        return _as_permissions(cached_permissions)
    if actor.permissions is not None:
        return list(actor.permissions)
    if actor.system_role in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
        return list(DEFAULT_PERMISSION_OBJECTS)
    if actor.system_role == SystemRole.USER and not actor.profile_id:
        return list(FALLBACK_PERMISSION_OBJECTS)
    return []


def _scope_satisfied(
    entry: Permission,
    actor: Actor,
    *,
    target_organization_id=None,
    target_unit_id=None,
    owner_id=None,
    enforce_self: bool = False,
) -> bool:
    scope = entry.scope
    if scope == PermissionScope.ORGANIZATION:
        return not target_organization_id or same_id(target_organization_id, actor.organization_id)
    if scope == PermissionScope.UNIT:
        # no target unit: same organization implies access to own unit
        return not target_unit_id or same_id(target_unit_id, actor.unit_id)
    if scope == PermissionScope.SELF:
        if enforce_self and owner_id:
            return same_id(owner_id, actor.id)
        return True
    return True


def _check_super_admin(actor: Actor, resource, action, target_organization_id, target_unit_id, cached_permissions):
    return ALLOW


def _check_admin(actor: Actor, resource, action, target_organization_id, target_unit_id, cached_permissions):
    if target_organization_id and not same_id(target_organization_id, actor.organization_id):
        return deny(REASON_DIFFERENT_ORGANIZATION)
    return ALLOW


def _check_user(
    actor: Actor,
    resource,
    action,
    target_organization_id,
    target_unit_id,
    cached_permissions,
    *,
    owner_id=None,
    enforce_self: bool = False,
):
    # hard tenant boundary before any permission scan
    if target_organization_id and not same_id(target_organization_id, actor.organization_id):
        return deny(REASON_DIFFERENT_ORGANIZATION)

    for entry in get_user_permissions(actor, cached_permissions):
        if not entry.matches(resource, action):
            continue
        if _scope_satisfied(
            entry,
            actor,
            target_organization_id=target_organization_id,
            target_unit_id=target_unit_id,
            owner_id=owner_id,
            enforce_self=enforce_self,
        ):
            return ALLOW

    return deny(REASON_INSUFFICIENT)


RoleCheck = Callable[..., PermissionCheckResult]

# Every recognized role has an explicit entry; anything else is "Unknown role".
ROLE_CHECKS: dict[str, RoleCheck] = {
    SystemRole.SUPER_ADMIN: _check_super_admin,
    SystemRole.ADMIN: _check_admin,
    SystemRole.USER: _check_user,
}


def has_permission(
    actor: Optional[Actor],
    resource: str,
    action: str,
    target_organization_id=None,
    target_unit_id=None,
    cached_permissions=None,
) -> PermissionCheckResult:
    if actor is None:
        return deny(REASON_NOT_AUTHENTICATED)

    check = ROLE_CHECKS.get(actor.system_role)
    if check is None:
        return deny(REASON_UNKNOWN_ROLE)

    return check(actor, resource, action, target_organization_id, target_unit_id, cached_permissions)


def can_perform_action(
    actor: Optional[Actor],
    resource: str,
    action: str,
    target_organization_id=None,
    target_unit_id=None,
    cached_permissions=None,
) -> bool:
    return has_permission(
        actor,
        resource,
        action,
        target_organization_id=target_organization_id,
        target_unit_id=target_unit_id,
        cached_permissions=cached_permissions,
    ).allowed


def can_access_resource(
    actor: Optional[Actor],
    resource: str,
    action: str,
    *,
    organization_id=None,
    unit_id=None,
    owner_id=None,
    cached_permissions=None,
) -> PermissionCheckResult:
    """
    Same decision as has_permission, except that `self`-scoped entries are
    checked against `owner_id` when one is supplied.
    """
    if actor is None:
        return deny(REASON_NOT_AUTHENTICATED)

    if actor.system_role == SystemRole.USER:
        return _check_user(
            actor,
            resource,
            action,
            organization_id,
            unit_id,
            cached_permissions,
            owner_id=owner_id,
            enforce_self=True,
        )

    return has_permission(
        actor,
        resource,
        action,
        target_organization_id=organization_id,
        target_unit_id=unit_id,
        cached_permissions=cached_permissions,
    )


def has_basic_permission(actor: Optional[Actor], resource: str, action: str, cached_permissions=None) -> bool:
    """
    Resource/action match ignoring scope and organization.
    """
    if actor is None:
        return False
    if actor.system_role in (SystemRole.SUPER_ADMIN, SystemRole.ADMIN):
        return True
    if actor.system_role != SystemRole.USER:
        return False
    return any(p.matches(resource, action) for p in get_user_permissions(actor, cached_permissions))


def belongs_to_organization(actor: Optional[Actor], organization_id) -> bool:
    if actor is None:
        return False
    if actor.system_role == SystemRole.SUPER_ADMIN:
        return True
    return bool(organization_id) and same_id(actor.organization_id, organization_id)


def belongs_to_unit(actor: Optional[Actor], unit_id) -> bool:
    if actor is None:
        return False
    if actor.system_role in (SystemRole.SUPER_ADMIN, SystemRole.ADMIN):
        return True
    return bool(unit_id) and same_id(actor.unit_id, unit_id)


def can_assign_role(assigner: Optional[Actor], target_role: str, target_organization_id=None) -> PermissionCheckResult:
    """
    Meta-permission: may `assigner` grant `target_role`, optionally inside
    `target_organization_id`.
    """
    if assigner is None:
        return deny(REASON_NOT_AUTHENTICATED)

    if assigner.system_role == SystemRole.SUPER_ADMIN:
        return ALLOW

    if assigner.system_role == SystemRole.ADMIN:
        if target_role in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
            return deny(REASON_ASSIGN_PRIVILEGED)
        if target_organization_id and not same_id(target_organization_id, assigner.organization_id):
            return deny(REASON_ASSIGN_OTHER_ORG)
        return ALLOW

    return deny(REASON_ASSIGN_USER)


def get_permission_summary(actor: Optional[Actor], cached_permissions=None) -> dict:
    """
    Flattened {resource: [actions]} view of the effective permissions.
    """
    if actor is None:
        return {}
    summary: dict[str, set[str]] = {}
    for p in get_user_permissions(actor, cached_permissions):
        summary.setdefault(p.resource, set()).update(p.actions)
    return {resource: sorted(actions) for resource, actions in summary.items()}


__all__ = [
    "ALLOW",
    "Actor",
    "Permission",
    "PermissionCheckResult",
    "ROLE_CHECKS",
    "belongs_to_organization",
    "belongs_to_unit",
    "can_access_resource",
    "can_assign_role",
    "can_perform_action",
    "deny",
    "get_permission_summary",
    "get_user_permissions",
    "has_basic_permission",
    "has_permission",
    "same_id",
]
