# clinic_core/iam/guards.py

from __future__ import annotations

import logging
from typing import Callable, Optional

from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import BasePermission

from clinic_core.common.api.exceptions import Forbidden
from clinic_core.iam.permissions import (
    REASON_NOT_AUTHENTICATED,
    Actor,
    PermissionCheckResult,
    has_permission,
)
from clinic_core.iam.roles import SystemRole, has_required_role
from clinic_core.iam.services.actor import get_request_actor

logger = logging.getLogger(__name__)

REASON_INSUFFICIENT_ROLE = "Insufficient role permissions"
REASON_NO_ORGANIZATION = "User is not part of an organization"
REASON_ADMIN_REQUIRED = "Admin access required"

Evaluator = Callable[..., PermissionCheckResult]

# ViewSet action -> evaluator action
ACTION_MAP: dict[str, str] = {
    "list": "read",
    "retrieve": "read",
    "create": "create",
    "update": "update",
    "partial_update": "update",
    "destroy": "delete",
}

_METHOD_ACTIONS = {
    "GET": "read",
    "HEAD": "read",
    "OPTIONS": "read",
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}


def require_actor(request) -> Actor:
    actor = get_request_actor(request)
    if actor is None:
        raise NotAuthenticated(REASON_NOT_AUTHENTICATED)
    return actor


def _log_denial(actor: Optional[Actor], resource: str, action: str, reason: str | None) -> None:
    logger.info(
        "Permission denied: actor=%s role=%s resource=%s action=%s reason=%s",
        getattr(actor, "id", None),
        getattr(actor, "system_role", None),
        resource,
        action,
        reason,
    )


def require_permission(
    request,
    resource: str,
    action: str,
    organization_id=None,
    unit_id=None,
    *,
    evaluator: Evaluator = has_permission,
) -> Actor:
    """
    Raise NotAuthenticated / Forbidden unless the request actor may perform
    `action` on `resource` within the given targets. Returns the actor.
    """
    actor = require_actor(request)
    result = evaluator(
        actor,
        resource,
        action,
        target_organization_id=organization_id,
        target_unit_id=unit_id,
    )
    if not result.allowed:
        _log_denial(actor, resource, action, result.reason)
        raise Forbidden(result.reason)
    return actor


def require_role(request, role: str) -> Actor:
    actor = require_actor(request)
    if not has_required_role(actor, role):
        _log_denial(actor, "*", f"role:{role}", REASON_INSUFFICIENT_ROLE)
        raise Forbidden(REASON_INSUFFICIENT_ROLE)
    return actor


def default_object_targets(obj) -> tuple:
    return getattr(obj, "organization_id", None), getattr(obj, "unit_id", None)


class ResourcePermission(BasePermission):
    """
    DRF permission gating a view on one resource of the permission registry.

    Built through resource_guard(); the evaluator is a class attribute so
    tests and callers can inject their own.
    """
    resource: str = ""
    fixed_action: Optional[str] = None
    required_role: Optional[str] = None
    action_map: dict[str, str] = ACTION_MAP
    object_targets: Callable = staticmethod(default_object_targets)
    evaluator: Evaluator = staticmethod(has_permission)

    def _infer_action(self, request, view) -> str | None:
        if self.fixed_action:
            return self.fixed_action

        view_action = getattr(view, "action", None)
        if view_action and view_action in self.action_map:
            return self.action_map[view_action]

        # extra actions without a declared mapping fall back to the HTTP method
        return _METHOD_ACTIONS.get(request.method.upper())

    def _check(self, request, view, organization_id=None, unit_id=None) -> bool:
        actor = require_actor(request)

        if self.required_role and not has_required_role(actor, self.required_role):
            _log_denial(actor, self.resource, f"role:{self.required_role}", REASON_INSUFFICIENT_ROLE)
            raise Forbidden(REASON_INSUFFICIENT_ROLE)

        action = self._infer_action(request, view)
        if action is None:
            _log_denial(actor, self.resource, request.method, "unmapped action")
            raise Forbidden()

        result = self.evaluator(
            actor,
            self.resource,
            action,
            target_organization_id=organization_id,
            target_unit_id=unit_id,
        )
        if not result.allowed:
            _log_denial(actor, self.resource, action, result.reason)
            raise Forbidden(result.reason)
        return True

    def has_permission(self, request, view) -> bool:
        return self._check(request, view)

    def has_object_permission(self, request, view, obj) -> bool:
        organization_id, unit_id = self.object_targets(obj)
        return self._check(request, view, organization_id=organization_id, unit_id=unit_id)


def resource_guard(
    resource: str,
    *,
    action: Optional[str] = None,
    required_role: Optional[str] = None,
    evaluator: Evaluator = has_permission,
    action_map: Optional[dict[str, str]] = None,
    object_targets: Optional[Callable] = None,
) -> type[ResourcePermission]:
    """
    Build a permission class for `resource`.

    action:        evaluator action for every view action (otherwise inferred)
    required_role: minimum system role, checked before the evaluator
    evaluator:     the decision function (has_permission unless injected)
    action_map:    extra ViewSet action -> evaluator action entries
    """
    attrs = {
        "resource": resource,
        "fixed_action": action,
        "required_role": required_role,
        "action_map": {**ACTION_MAP, **(action_map or {})},
        "evaluator": staticmethod(evaluator),
    }
    if object_targets is not None:
        attrs["object_targets"] = staticmethod(object_targets)

    return type(f"{resource.title().replace('_', '')}Permission", (ResourcePermission,), attrs)


class ActorRequired(BasePermission):
    """
    Authenticated, resolvable actor that belongs to an organization
    (super_admin accounts may have none).
    """

    def has_permission(self, request, view) -> bool:
        actor = require_actor(request)
        if actor.system_role != SystemRole.SUPER_ADMIN and not actor.organization_id:
            raise Forbidden(REASON_NO_ORGANIZATION)
        return True


class AdminRequired(ActorRequired):
    """admin or super_admin."""

    def has_permission(self, request, view) -> bool:
        super().has_permission(request, view)
        actor = require_actor(request)
        if actor.system_role not in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
            _log_denial(actor, "*", "admin", REASON_ADMIN_REQUIRED)
            raise Forbidden(REASON_ADMIN_REQUIRED)
        return True


class SuperAdminRequired(ActorRequired):
    def has_permission(self, request, view) -> bool:
        actor = require_actor(request)
        if actor.system_role != SystemRole.SUPER_ADMIN:
            _log_denial(actor, "*", "super_admin", REASON_INSUFFICIENT_ROLE)
            raise Forbidden(REASON_INSUFFICIENT_ROLE)
        return True
