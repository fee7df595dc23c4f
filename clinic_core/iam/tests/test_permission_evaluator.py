# clinic_core/iam/tests/test_permission_evaluator.py
import pytest

from clinic_core.conftest import make_actor
from clinic_core.iam.permissions import (
    REASON_DIFFERENT_ORGANIZATION,
    REASON_INSUFFICIENT,
    REASON_NOT_AUTHENTICATED,
    REASON_UNKNOWN_ROLE,
    belongs_to_organization,
    belongs_to_unit,
    can_access_resource,
    can_perform_action,
    get_permission_summary,
    get_user_permissions,
    has_basic_permission,
    has_permission,
)
from clinic_core.iam.roles import SystemRole
from clinic_core.iam.statements import CRUD, RESOURCES

PATIENT_READ_UNIT = {"resource": "patient", "actions": ["read"], "scope": "unit"}


def test_no_actor_is_denied():
    result = has_permission(None, "patient", "read")
    assert result.allowed is False
    assert result.reason == REASON_NOT_AUTHENTICATED


@pytest.mark.parametrize("resource", RESOURCES)
@pytest.mark.parametrize("action", CRUD)
@pytest.mark.parametrize("target_org,target_unit", [(None, None), ("org-2", None), ("org-9", "u-9")])
def test_super_admin_is_always_allowed(resource, action, target_org, target_unit):
    actor = make_actor(SystemRole.SUPER_ADMIN, organization_id=None)
    assert has_permission(actor, resource, action, target_org, target_unit).allowed


@pytest.mark.parametrize("resource", RESOURCES)
def test_admin_denied_on_other_organization(resource):
    actor = make_actor(SystemRole.ADMIN, organization_id="org-1")
    result = has_permission(actor, resource, "read", target_organization_id="org-2")
    assert result.allowed is False
    assert "different organization" in result.reason


def test_admin_allowed_in_own_organization_and_without_target():
    actor = make_actor(SystemRole.ADMIN, organization_id="org-1")
    assert has_permission(actor, "unit", "delete", target_organization_id="org-1").allowed
    assert has_permission(actor, "unit", "delete").allowed
    # unit targets do not restrict admins
    assert has_permission(actor, "patient", "update", "org-1", "any-unit").allowed


def test_user_without_matching_entry_is_denied():
    actor = make_actor(permissions=[{"resource": "dashboard", "actions": ["read"], "scope": "organization"}])
    result = has_permission(actor, "patient", "read")
    assert result.allowed is False
    assert result.reason == REASON_INSUFFICIENT


def test_user_cross_organization_denied_before_permission_scan():
    actor = make_actor(permissions=[{"resource": "*", "actions": list(CRUD)}])
    result = has_permission(actor, "patient", "read", target_organization_id="org-2")
    assert result.reason == REASON_DIFFERENT_ORGANIZATION


def test_unit_scope_without_actor_unit_denies_a_specific_unit():
    actor = make_actor(organization_id="org1", profile_id="p1", permissions=[PATIENT_READ_UNIT])
    assert has_permission(actor, "patient", "read", target_unit_id="u1").allowed is False


def test_unit_scope_without_target_unit_falls_back_to_organization():
    actor = make_actor(organization_id="org1", profile_id="p1", permissions=[PATIENT_READ_UNIT])
    assert has_permission(actor, "patient", "read").allowed is True


def test_unit_scope_matches_own_unit():
    actor = make_actor(unit_id="u1", permissions=[PATIENT_READ_UNIT])
    assert has_permission(actor, "patient", "read", "org-1", "u1").allowed
    assert not has_permission(actor, "patient", "read", "org-1", "u2").allowed


def test_wildcard_resource_matches_any_resource():
    actor = make_actor(permissions=[{"resource": "*", "actions": ["read"]}])
    assert has_permission(actor, "report", "read").allowed
    assert not has_permission(actor, "report", "delete").allowed


def test_self_scope_is_a_match_at_evaluator_level():
    actor = make_actor(permissions=[{"resource": "user", "actions": ["read"], "scope": "self"}])
    assert has_permission(actor, "user", "read").allowed


def test_scan_skips_entries_whose_scope_fails():
    actor = make_actor(
        unit_id="u1",
        permissions=[
            {"resource": "patient", "actions": ["read"], "scope": "unit"},
            {"resource": "patient", "actions": ["read"], "scope": "organization"},
        ],
    )
    # the unit entry fails for u2, the organization entry then grants it
    assert has_permission(actor, "patient", "read", "org-1", "u2").allowed

    narrow_first = make_actor(
        unit_id="u1",
        permissions=[
            {"resource": "patient", "actions": ["read"], "scope": "organization"},
            {"resource": "patient", "actions": ["update"], "scope": "unit"},
        ],
    )
    assert not has_permission(narrow_first, "patient", "update", "org-1", "u2").allowed


def test_unknown_role_is_denied():
    actor = make_actor("receptionist")
    result = has_permission(actor, "dashboard", "read")
    assert result.allowed is False
    assert result.reason == REASON_UNKNOWN_ROLE


def test_evaluation_is_idempotent():
    actor = make_actor(unit_id="u1", permissions=[PATIENT_READ_UNIT])
    first = has_permission(actor, "patient", "read", "org-1", "u2")
    second = has_permission(actor, "patient", "read", "org-1", "u2")
    assert first == second


def test_cached_permissions_take_precedence():
    actor = make_actor(permissions=[])
    assert not has_permission(actor, "patient", "read").allowed
    assert has_permission(actor, "patient", "read", cached_permissions=[PATIENT_READ_UNIT]).allowed


def test_user_without_profile_gets_dashboard_fallback():
    actor = make_actor(profile_id=None, permissions=None)
    perms = get_user_permissions(actor)
    assert [p.to_dict() for p in perms] == [{"resource": "dashboard", "actions": ["read"], "scope": "organization"}]
    assert has_permission(actor, "dashboard", "read").allowed
    assert not has_permission(actor, "patient", "read").allowed


def test_user_with_unresolved_profile_has_no_permissions():
    actor = make_actor(profile_id="p1", permissions=None)
    assert get_user_permissions(actor) == []
    assert not has_permission(actor, "dashboard", "read").allowed


def test_admin_reports_default_catalog():
    resources = {p.resource for p in get_user_permissions(make_actor(SystemRole.ADMIN))}
    assert {"dashboard", "unit", "user", "patient", "appointment", "doctor", "profile"} <= resources


def test_can_access_resource_enforces_self_scope_with_owner():
    actor = make_actor(id="acc-1", permissions=[{"resource": "user", "actions": ["read"], "scope": "self"}])
    assert can_access_resource(actor, "user", "read", owner_id="acc-1").allowed
    assert not can_access_resource(actor, "user", "read", owner_id="acc-2").allowed
    # no owner supplied behaves like the evaluator
    assert can_access_resource(actor, "user", "read").allowed


def test_can_access_resource_for_admin_uses_organization_boundary():
    actor = make_actor(SystemRole.ADMIN, organization_id="org-1")
    assert can_access_resource(actor, "user", "read", organization_id="org-1", owner_id="x").allowed
    assert not can_access_resource(actor, "user", "read", organization_id="org-2").allowed
    assert can_access_resource(None, "user", "read").reason == REASON_NOT_AUTHENTICATED


def test_boolean_helpers():
    actor = make_actor(unit_id="u1", permissions=[PATIENT_READ_UNIT])
    assert can_perform_action(actor, "patient", "read") is True
    assert can_perform_action(actor, "patient", "read", "org-2") is False

    # scope and organization are ignored by the basic check
    assert has_basic_permission(actor, "patient", "read") is True
    assert has_basic_permission(actor, "patient", "delete") is False
    assert has_basic_permission(make_actor(SystemRole.ADMIN), "anything", "delete") is True
    assert has_basic_permission(None, "patient", "read") is False


def test_membership_helpers():
    user = make_actor(organization_id="org-1", unit_id="u1")
    admin = make_actor(SystemRole.ADMIN, organization_id="org-1")
    root = make_actor(SystemRole.SUPER_ADMIN, organization_id=None)

    assert belongs_to_organization(user, "org-1")
    assert not belongs_to_organization(user, "org-2")
    assert belongs_to_organization(root, "org-2")
    assert not belongs_to_organization(None, "org-1")

    assert belongs_to_unit(user, "u1")
    assert not belongs_to_unit(user, "u2")
    assert belongs_to_unit(admin, "u2")


def test_permission_summary_merges_entries():
    actor = make_actor(
        permissions=[
            {"resource": "patient", "actions": ["read"], "scope": "unit"},
            {"resource": "patient", "actions": ["update", "read"], "scope": "self"},
        ]
    )
    assert get_permission_summary(actor) == {"patient": ["read", "update"]}
    assert get_permission_summary(None) == {}


def test_string_and_uuid_ids_compare_equal():
    import uuid

    org = uuid.uuid4()
    actor = make_actor(SystemRole.ADMIN, organization_id=org)
    assert has_permission(actor, "unit", "read", target_organization_id=str(org)).allowed
