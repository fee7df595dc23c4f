# clinic_core/iam/tests/test_routes_navigation.py
from clinic_core.conftest import make_actor
from clinic_core.iam.routes import (
    ORG,
    REASON_INSUFFICIENT_ROLE,
    REASON_LOGIN_REQUIRED,
    UNIT,
    can_access_route,
    check_route,
    get_accessible_routes,
    navigation_for,
)
from clinic_core.iam.roles import SystemRole

RECEPTION = [
    {"resource": "dashboard", "actions": ["read"], "scope": "organization"},
    {"resource": "patient", "actions": ["read"], "scope": "unit"},
]


def test_route_requires_login():
    result = check_route(None, ORG + "/dashboard")
    assert result.allowed is False
    assert result.reason == REASON_LOGIN_REQUIRED
    assert get_accessible_routes(None) == []


def test_unknown_route_is_open_to_authenticated_actors():
    assert can_access_route(make_actor(permissions=[]), "/settings/theme")


def test_required_role_applies_before_permissions():
    actor = make_actor(permissions=[{"resource": "*", "actions": ["read"]}])
    result = check_route(actor, ORG + "/profiles")
    assert result.reason == REASON_INSUFFICIENT_ROLE
    assert can_access_route(make_actor(SystemRole.ADMIN), ORG + "/profiles")


def test_route_targets_feed_the_evaluator():
    actor = make_actor(organization_id="org-1", unit_id="u-1", permissions=RECEPTION)
    assert check_route(actor, UNIT + "/patients", organization_id="org-1", unit_id="u-1").allowed
    assert not check_route(actor, UNIT + "/patients", organization_id="org-1", unit_id="u-2").allowed
    assert not check_route(actor, UNIT + "/patients", organization_id="org-2", unit_id="u-1").allowed


def test_accessible_routes_for_profile_user():
    actor = make_actor(unit_id="u-1", permissions=RECEPTION)
    routes = get_accessible_routes(actor)
    assert ORG + "/dashboard" in routes
    assert UNIT + "/patients" in routes
    assert UNIT + "/appointments" not in routes
    assert ORG + "/profiles" not in routes


def test_navigation_filters_by_role_and_permission():
    actor = make_actor(organization_id="org-1", unit_id="u-1", permissions=RECEPTION)
    labels = [item["label"] for item in navigation_for(actor)]
    assert labels == ["Dashboard", "Patients"]

    patients = navigation_for(actor)[1]
    assert patients["href"] == "/organizations/org-1/units/u-1/patients"


def test_navigation_for_admin_hides_super_admin_items():
    labels = {item["label"] for item in navigation_for(make_actor(SystemRole.ADMIN))}
    assert {"Units", "Users", "Profiles", "Reports"} <= labels
    assert "Organizations" not in labels


def test_navigation_without_unit_leaves_unit_links_empty():
    items = navigation_for(make_actor(SystemRole.SUPER_ADMIN, organization_id=None), organization_id="org-7")
    by_label = {item["label"]: item for item in items}
    assert by_label["Organizations"]["href"] == "/organizations/org-7/organizations"
    assert by_label["Patients"]["href"] is None
    assert navigation_for(None) == []
