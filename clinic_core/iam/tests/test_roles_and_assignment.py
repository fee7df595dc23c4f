# clinic_core/iam/tests/test_roles_and_assignment.py
import pytest

from clinic_core.conftest import make_actor
from clinic_core.iam.permissions import (
    REASON_ASSIGN_OTHER_ORG,
    REASON_ASSIGN_PRIVILEGED,
    REASON_ASSIGN_USER,
    REASON_NOT_AUTHENTICATED,
    can_assign_role,
)
from clinic_core.iam.roles import SystemRole, describe_roles, has_required_role, role_summary


@pytest.mark.parametrize("role", [SystemRole.ADMIN, SystemRole.SUPER_ADMIN])
def test_higher_roles_satisfy_user_requirement(role):
    assert has_required_role(make_actor(role), SystemRole.USER)


@pytest.mark.parametrize("role", [SystemRole.ADMIN, SystemRole.USER])
def test_only_super_admin_satisfies_super_admin_requirement(role):
    assert not has_required_role(make_actor(role), SystemRole.SUPER_ADMIN)


def test_required_role_edge_cases():
    assert not has_required_role(None, SystemRole.USER)
    assert not has_required_role(make_actor(SystemRole.SUPER_ADMIN), "owner")
    assert not has_required_role(make_actor("guest"), SystemRole.USER)


def test_admin_cannot_assign_privileged_roles():
    admin = make_actor(SystemRole.ADMIN, organization_id="org1")
    result = can_assign_role(admin, "admin", "org1")
    assert result.allowed is False
    assert result.reason == REASON_ASSIGN_PRIVILEGED
    assert can_assign_role(admin, "super_admin").reason == REASON_ASSIGN_PRIVILEGED


def test_admin_cannot_assign_in_another_organization():
    admin = make_actor(SystemRole.ADMIN, organization_id="org1")
    result = can_assign_role(admin, "user", "org2")
    assert result.allowed is False
    assert result.reason == REASON_ASSIGN_OTHER_ORG


def test_admin_assigns_user_in_own_organization():
    admin = make_actor(SystemRole.ADMIN, organization_id="org1")
    assert can_assign_role(admin, "user", "org1").allowed
    assert can_assign_role(admin, "user").allowed


def test_super_admin_assigns_anything():
    root = make_actor(SystemRole.SUPER_ADMIN, organization_id=None)
    assert can_assign_role(root, "super_admin", "org-x").allowed


def test_users_and_anonymous_cannot_assign():
    assert can_assign_role(make_actor(), "user", "org-1").reason == REASON_ASSIGN_USER
    assert can_assign_role(None, "user").reason == REASON_NOT_AUTHENTICATED


def test_describe_roles_lists_hierarchy():
    roles = {r["role"]: r for r in describe_roles()}
    assert [roles[r]["level"] for r in ("user", "admin", "super_admin")] == [1, 2, 3]
    assert roles["admin"]["statements"]["organization"] == ["read", "update"]
    assert roles["user"]["statements"] == {"dashboard": ["read"]}
    assert role_summary("nobody") == []
