# clinic_core/iam/routes.py
"""
Page-level access table and sidebar navigation.

Route patterns use `{organization_id}` / `{unit_id}` placeholders; page views
declare the pattern they serve and the page guard resolves it here.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from clinic_core.iam.permissions import Actor, PermissionCheckResult, deny, has_permission
from clinic_core.iam.roles import SystemRole, has_required_role

REASON_INSUFFICIENT_ROLE = "Insufficient role permissions"
REASON_LOGIN_REQUIRED = "Please log in to access this page"


@dataclass(frozen=True)
class RoutePermission:
    resource: str
    action: str
    required_role: Optional[str] = None


ORG = "/organizations/{organization_id}"
UNIT = ORG + "/units/{unit_id}"

ROUTE_PERMISSIONS: dict[str, RoutePermission] = {
    ORG: RoutePermission("organization", "read"),
    ORG + "/dashboard": RoutePermission("dashboard", "read"),
    ORG + "/organizations": RoutePermission("organization", "read", SystemRole.ADMIN),
    ORG + "/units": RoutePermission("unit", "read"),
    ORG + "/users": RoutePermission("user", "read"),
    ORG + "/profiles": RoutePermission("profile", "read", SystemRole.ADMIN),
    UNIT + "/patients": RoutePermission("patient", "read"),
    UNIT + "/appointments": RoutePermission("appointment", "read"),
    UNIT + "/doctors": RoutePermission("doctor", "read"),
    UNIT + "/schedule": RoutePermission("schedule", "read"),
    UNIT + "/medical-records": RoutePermission("medical_record", "read"),
    UNIT + "/prescriptions": RoutePermission("prescription", "read"),
    UNIT + "/reports": RoutePermission("report", "read", SystemRole.ADMIN),
    "/dashboard": RoutePermission("dashboard", "read"),
}


@dataclass(frozen=True)
class NavItem:
    route: str
    label: str
    resource: str
    action: str
    system_roles: tuple[str, ...]


_ALL = (SystemRole.SUPER_ADMIN, SystemRole.ADMIN, SystemRole.USER)
_ADMINS = (SystemRole.SUPER_ADMIN, SystemRole.ADMIN)

NAVIGATION_ITEMS: tuple[NavItem, ...] = (
    NavItem(ORG + "/dashboard", "Dashboard", "dashboard", "read", _ALL),
    NavItem(ORG + "/units", "Units", "unit", "read", _ADMINS),
    NavItem(ORG + "/users", "Users", "user", "read", _ADMINS),
    NavItem(ORG + "/profiles", "Profiles", "profile", "read", _ADMINS),
    NavItem(ORG + "/organizations", "Organizations", "organization", "read", (SystemRole.SUPER_ADMIN,)),
    NavItem(UNIT + "/patients", "Patients", "patient", "read", _ALL),
    NavItem(UNIT + "/appointments", "Appointments", "appointment", "read", _ALL),
    NavItem(UNIT + "/doctors", "Doctors", "doctor", "read", _ALL),
    NavItem(UNIT + "/schedule", "Schedule", "schedule", "read", _ALL),
    NavItem(UNIT + "/medical-records", "Medical records", "medical_record", "read", _ALL),
    NavItem(UNIT + "/prescriptions", "Prescriptions", "prescription", "read", _ALL),
    NavItem(UNIT + "/reports", "Reports", "report", "read", _ADMINS),
)


def check_route(
    actor: Optional[Actor],
    route: str,
    *,
    organization_id=None,
    unit_id=None,
) -> PermissionCheckResult:
    """
    Decision for rendering `route`, with the denial reason.
    Routes missing from the table are open to any authenticated actor.
    """
    if actor is None:
        return deny(REASON_LOGIN_REQUIRED)

    rule = ROUTE_PERMISSIONS.get(route)
    if rule is None:
        return PermissionCheckResult(allowed=True)

    if rule.required_role and not has_required_role(actor, rule.required_role):
        return deny(REASON_INSUFFICIENT_ROLE)

    return has_permission(
        actor,
        rule.resource,
        rule.action,
        target_organization_id=organization_id,
        target_unit_id=unit_id,
    )


def can_access_route(actor: Optional[Actor], route: str) -> bool:
    return check_route(actor, route).allowed


def get_accessible_routes(actor: Optional[Actor]) -> list[str]:
    if actor is None:
        return []
    return [route for route in ROUTE_PERMISSIONS if can_access_route(actor, route)]


def _href(route: str, organization_id, unit_id) -> Optional[str]:
    if "{organization_id}" in route and not organization_id:
        return None
    if "{unit_id}" in route and not unit_id:
        return None
    return route.format(organization_id=organization_id, unit_id=unit_id)


def navigation_for(actor: Optional[Actor], *, organization_id=None, unit_id=None) -> list[dict]:
    """
    Sidebar entries visible to `actor`: filtered by system role first, then
    by the evaluator. Links default to the actor's own organization and unit.
    """
    if actor is None:
        return []

    organization_id = organization_id or actor.organization_id
    unit_id = unit_id or actor.unit_id

    items = []
    for item in NAVIGATION_ITEMS:
        if actor.system_role not in item.system_roles:
            continue
        if not has_permission(actor, item.resource, item.action).allowed:
            continue
        items.append(
            {
                "label": item.label,
                "route": item.route,
                "href": _href(item.route, organization_id, unit_id),
                "resource": item.resource,
                "action": item.action,
            }
        )
    return items
