# clinic_core/units/tests/test_units_api.py
import pytest

from clinic_core.conftest import ADDRESS
from clinic_core.doctors.models import Doctor
from clinic_core.iam.models import Profile
from clinic_core.units.models import Unit

pytestmark = pytest.mark.django_db

URL = "/api/v1/units/"


def unit_payload(org, **extra):
    data = {
        "organization_id": str(org.id),
        "name": "Posto Sul",
        "phone": "1932221111",
        "specialties": ["Pediatria", "Clinica geral"],
        "address": ADDRESS,
    }
    data.update(extra)
    return data


def test_admin_creates_unit(client_for, admin, org):
    res = client_for(admin).post(URL, unit_payload(org), format="json")
    assert res.status_code == 201, res.content
    assert res.json()["specialties"] == ["Pediatria", "Clinica geral"]


def test_admin_cannot_create_unit_elsewhere(client_for, admin, other_org):
    res = client_for(admin).post(URL, unit_payload(other_org), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Access denied to different organization"


def test_user_cannot_create_units(client_for, plain_user, org):
    res = client_for(plain_user).post(URL, unit_payload(org), format="json")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Admin access required"


def test_listing_per_role(client_for, super_admin, admin, plain_user, unit, second_unit, foreign_unit):
    assert len(client_for(super_admin).get(URL).json()) == 3

    only_other = client_for(super_admin).get(URL, {"organization_id": str(foreign_unit.organization_id)}).json()
    assert [u["id"] for u in only_other] == [str(foreign_unit.id)]

    assert {u["id"] for u in client_for(admin).get(URL).json()} == {str(unit.id), str(second_unit.id)}
    res = client_for(plain_user).get(URL)
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Insufficient permissions for this resource and action"


def test_unit_readers_list_only_their_unit(client_for, make_account, org, unit, second_unit):
    viewer = Profile.objects.create(
        organization=org,
        name="Unit viewer",
        permissions=[{"resource": "unit", "actions": ["read"], "scope": "unit"}],
    )
    placed = make_account("user", organization=org, unit=unit, profile=viewer)
    assert [u["id"] for u in client_for(placed).get(URL).json()] == [str(unit.id)]

    unplaced = make_account("user", organization=org, profile=viewer)
    assert client_for(unplaced).get(URL).json() == []


def test_retrieve_and_update_check_organization(client_for, admin, other_admin, unit):
    assert client_for(admin).get(f"{URL}{unit.id}/").status_code == 200
    assert client_for(other_admin).get(f"{URL}{unit.id}/").status_code == 403

    res = client_for(admin).patch(f"{URL}{unit.id}/", {"manager": "Dra. Helena"}, format="json")
    assert res.status_code == 200
    assert res.json()["manager"] == "Dra. Helena"

    assert client_for(other_admin).patch(f"{URL}{unit.id}/", {"manager": "x"}, format="json").status_code == 403


def test_delete_refuses_units_with_clinical_records(client_for, admin, unit, second_unit):
    Doctor.objects.create(organization_id=unit.organization_id, unit_id=unit.id, name="Dr. Paulo", crm="SP-1")

    res = client_for(admin).delete(f"{URL}{unit.id}/")
    assert res.status_code == 400

    assert client_for(admin).delete(f"{URL}{second_unit.id}/").status_code == 204
    assert not Unit.objects.filter(id=second_unit.id).exists()


def test_by_organization(client_for, admin, other_admin, org, unit):
    res = client_for(admin).get(f"{URL}by-organization/", {"organization_id": str(org.id)})
    assert [u["id"] for u in res.json()] == [str(unit.id)]

    res = client_for(other_admin).get(f"{URL}by-organization/", {"organization_id": str(org.id)})
    assert res.status_code == 403
