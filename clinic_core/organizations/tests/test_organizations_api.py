# clinic_core/organizations/tests/test_organizations_api.py
import pytest

from clinic_core.conftest import ADDRESS
from clinic_core.organizations.models import Organization

pytestmark = pytest.mark.django_db

URL = "/api/v1/organizations/"


def org_payload(**extra):
    data = {
        "name": "Clinica Nova",
        "email": "nova@clinic.test",
        "phone": "1933334444",
        "cnpj": "12.345.678/0001-90",
        "address": ADDRESS,
    }
    data.update(extra)
    return data


def test_super_admin_lists_tree(client_for, super_admin, org, other_org):
    child = Organization.objects.create(name="Filial Vida", parent=org, address=ADDRESS)

    tree = client_for(super_admin).get(URL).json()
    by_name = {node["name"]: node for node in tree}
    assert set(by_name) == {org.name, other_org.name}
    assert [c["id"] for c in by_name[org.name]["children"]] == [str(child.id)]


def test_members_list_only_their_organization(client_for, plain_user, org, other_org):
    tree = client_for(plain_user).get(URL).json()
    assert [node["id"] for node in tree] == [str(org.id)]


def test_retrieve_requires_admin_of_same_organization(client_for, admin, plain_user, org, other_org):
    assert client_for(admin).get(f"{URL}{org.id}/").status_code == 200

    res = client_for(admin).get(f"{URL}{other_org.id}/")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Insufficient permissions to read this organization"

    res = client_for(plain_user).get(f"{URL}{org.id}/")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Admin access required"


def test_admin_creates_only_child_organizations(client_for, admin, org):
    c = client_for(admin)
    res = c.post(URL, org_payload(), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Admin can only create organizations under their own organization"

    res = c.post(URL, org_payload(parent_id=str(org.id)), format="json")
    assert res.status_code == 201
    assert res.json()["parent_id"] == str(org.id)


def test_super_admin_creates_root_organization(client_for, super_admin):
    res = client_for(super_admin).post(URL, org_payload(slug="nova"), format="json")
    assert res.status_code == 201
    assert Organization.objects.get(slug="nova").parent_id is None


def test_update_respects_organization_boundary(client_for, admin, other_admin, org):
    res = client_for(admin).patch(f"{URL}{org.id}/", {"name": "Vida Saude"}, format="json")
    assert res.status_code == 200
    assert res.json()["name"] == "Vida Saude"

    res = client_for(other_admin).patch(f"{URL}{org.id}/", {"name": "x"}, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Access denied to different organization"


def test_admin_cannot_move_organizations(client_for, admin, org, other_org):
    res = client_for(admin).patch(f"{URL}{org.id}/", {"parent_id": str(other_org.id)}, format="json")
    assert res.status_code == 403


def test_destroy_is_super_admin_only(client_for, admin, super_admin):
    target = Organization.objects.create(name="Temp", address=ADDRESS)
    assert client_for(admin).delete(f"{URL}{target.id}/").status_code == 403
    assert client_for(super_admin).delete(f"{URL}{target.id}/").status_code == 204
    assert not Organization.objects.filter(id=target.id).exists()


def test_active_organization(client_for, admin, super_admin, org, other_org):
    res = client_for(admin).get(f"{URL}active/")
    assert res.json()["id"] == str(org.id)

    c = client_for(super_admin)
    assert c.get(f"{URL}active/").status_code == 404

    res = c.post(f"{URL}set-active/", {"organization_id": str(other_org.id)}, format="json")
    assert res.status_code == 200
    assert c.get(f"{URL}active/").json()["id"] == str(other_org.id)


def test_admin_cannot_activate_other_organization(client_for, admin, other_org):
    res = client_for(admin).post(f"{URL}set-active/", {"organization_id": str(other_org.id)}, format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Cannot access this organization"
