# clinic_core/iam/tests/test_users_api.py
import pytest
from django.contrib.auth import get_user_model

from clinic_core.iam.models import Account, Profile

pytestmark = pytest.mark.django_db

URL = "/api/v1/users/"


def new_user(org, **extra):
    data = {
        "full_name": "Ana Souza",
        "email": "ana@clinic.test",
        "password": "segredo123",
        "organization_id": str(org.id),
    }
    data.update(extra)
    return data


def test_admin_creates_user_in_own_organization(client_for, admin, org, unit):
    res = client_for(admin).post(URL, new_user(org, unit_id=str(unit.id)), format="json")
    assert res.status_code == 201, res.content

    body = res.json()
    assert body["system_role"] == "user"
    assert body["organization_name"] == org.name
    assert get_user_model().objects.get(username="ana@clinic.test").check_password("segredo123")


def test_admin_defaults_organization_to_its_own(client_for, admin, org):
    data = new_user(org)
    data.pop("organization_id")
    res = client_for(admin).post(URL, data, format="json")
    assert res.status_code == 201
    assert res.json()["organization_id"] == str(org.id)


def test_admin_cannot_create_admins(client_for, admin, org):
    res = client_for(admin).post(URL, new_user(org, system_role="admin"), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Admin cannot assign super_admin or admin roles"


def test_admin_cannot_create_in_other_organization(client_for, admin, other_org):
    res = client_for(admin).post(URL, new_user(other_org), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot create user in different organization"


def test_user_cannot_create_users(client_for, reception_user, org):
    res = client_for(reception_user).post(URL, new_user(org), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Only admins can create users"


def test_duplicate_email_is_rejected(client_for, admin, org, plain_user):
    res = client_for(admin).post(URL, new_user(org, email=plain_user.email), format="json")
    assert res.status_code == 400


def test_admin_list_excludes_caller_and_other_organizations(client_for, admin, plain_user, other_admin):
    ids = {u["id"] for u in client_for(admin).get(URL).json()}
    assert str(plain_user.id) in ids
    assert str(admin.id) not in ids
    assert str(other_admin.id) not in ids


def test_user_without_user_permission_cannot_list(client_for, plain_user):
    res = client_for(plain_user).get(URL)
    assert res.status_code == 403


def test_user_with_user_read_permission_lists_own_organization(client_for, make_account, org, unit, admin):
    profile = Profile.objects.create(
        organization=org,
        name="HR",
        permissions=[{"resource": "user", "actions": ["read"], "scope": "organization"}],
    )
    hr = make_account("user", organization=org, unit=unit, profile=profile)
    ids = {u["id"] for u in client_for(hr).get(URL).json()}
    assert ids == {str(admin.id)}


def test_retrieve_rules(client_for, admin, other_admin, plain_user, reception_user, super_admin):
    assert client_for(admin).get(f"{URL}{plain_user.id}/").status_code == 200
    assert client_for(super_admin).get(f"{URL}{plain_user.id}/").status_code == 200
    assert client_for(plain_user).get(f"{URL}{plain_user.id}/").status_code == 200

    res = client_for(other_admin).get(f"{URL}{plain_user.id}/")
    assert res.status_code == 403

    res = client_for(plain_user).get(f"{URL}{reception_user.id}/")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot access other users"


def test_self_scoped_permission_only_reaches_own_record(client_for, make_account, org, unit, plain_user):
    profile = Profile.objects.create(
        organization=org,
        name="Self",
        permissions=[{"resource": "user", "actions": ["read"], "scope": "self"}],
    )
    me = make_account("user", organization=org, unit=unit, profile=profile)
    assert client_for(me).get(f"{URL}{me.id}/").status_code == 200
    assert client_for(me).get(f"{URL}{plain_user.id}/").status_code == 403


def test_user_updates_own_name_but_not_role(client_for, plain_user):
    c = client_for(plain_user)
    res = c.patch(f"{URL}{plain_user.id}/", {"full_name": "New Name"}, format="json")
    assert res.status_code == 200
    assert res.json()["full_name"] == "New Name"

    res = c.patch(f"{URL}{plain_user.id}/", {"system_role": "admin"}, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot change your own role, organization or profile"


def test_user_cannot_update_others(client_for, plain_user, reception_user):
    res = client_for(plain_user).patch(f"{URL}{reception_user.id}/", {"full_name": "x"}, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot update other users"


def test_admin_update_across_organizations_is_forbidden(client_for, other_admin, plain_user):
    res = client_for(other_admin).patch(f"{URL}{plain_user.id}/", {"full_name": "x"}, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot update user from different organization"


def test_delete_rules(client_for, admin, other_admin, plain_user, reception_user):
    res = client_for(reception_user).delete(f"{URL}{plain_user.id}/")
    assert res.status_code == 403

    res = client_for(other_admin).delete(f"{URL}{plain_user.id}/")
    assert res.status_code == 403

    res = client_for(admin).delete(f"{URL}{plain_user.id}/")
    assert res.status_code == 204
    assert not Account.objects.filter(id=plain_user.id).exists()
    assert not get_user_model().objects.filter(username=plain_user.user.username).exists()


def test_list_all_is_super_admin_only(client_for, admin, super_admin, plain_user):
    assert client_for(admin).get(f"{URL}list-all/").status_code == 403

    res = client_for(super_admin).get(f"{URL}list-all/?limit=1")
    assert res.status_code == 200
    body = res.json()
    assert body["count"] == 3
    assert len(body["results"]) == 1


def test_by_organization_and_by_unit(client_for, admin, other_admin, plain_user, org, unit, second_unit):
    c = client_for(admin)
    res = c.get(f"{URL}by-organization/", {"organization_id": str(org.id)})
    assert {u["id"] for u in res.json()} == {str(admin.id), str(plain_user.id)}

    assert client_for(other_admin).get(f"{URL}by-organization/", {"organization_id": str(org.id)}).status_code == 403
    assert c.get(f"{URL}by-organization/").status_code == 400

    res = c.get(f"{URL}by-unit/", {"unit_id": str(unit.id)})
    assert [u["id"] for u in res.json()] == [str(plain_user.id)]

    # a user may only read its own unit
    assert client_for(plain_user).get(f"{URL}by-unit/", {"unit_id": str(unit.id)}).status_code == 200
    assert client_for(plain_user).get(f"{URL}by-unit/", {"unit_id": str(second_unit.id)}).status_code == 403


def test_assign_role(client_for, admin, super_admin, plain_user, reception_profile, make_account, org):
    res = client_for(admin).post(
        f"{URL}{plain_user.id}/assign-role/",
        {"system_role": "user", "profile_id": str(reception_profile.id)},
        format="json",
    )
    assert res.status_code == 200
    assert res.json()["profile_id"] == str(reception_profile.id)

    res = client_for(admin).post(f"{URL}{plain_user.id}/assign-role/", {"system_role": "admin"}, format="json")
    assert res.status_code == 403

    # an admin cannot demote a fellow admin
    peer = make_account("admin", organization=org)
    res = client_for(admin).post(f"{URL}{peer.id}/assign-role/", {"system_role": "user"}, format="json")
    assert res.status_code == 403

    res = client_for(super_admin).post(f"{URL}{plain_user.id}/assign-role/", {"system_role": "admin"}, format="json")
    assert res.status_code == 200
    plain_user.refresh_from_db()
    assert plain_user.system_role == "admin"
    assert plain_user.profile_id is None


def test_not_a_uuid_is_not_found(client_for, admin):
    assert client_for(admin).get(f"{URL}not-a-uuid/").status_code == 404
