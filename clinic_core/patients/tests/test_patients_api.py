# clinic_core/patients/tests/test_patients_api.py
import pytest

from clinic_core.conftest import ADDRESS
from clinic_core.patients.models import Patient

pytestmark = pytest.mark.django_db

URL = "/api/v1/patients/"


@pytest.fixture
def patient(unit):
    return Patient.objects.create(
        organization_id=unit.organization_id,
        unit_id=unit.id,
        name="Joana Pereira",
        phone="19988887777",
        cpf="123.456.789-00",
    )


def test_reception_registers_patient(client_for, reception_user, unit):
    res = client_for(reception_user).post(
        URL,
        {
            "unit_id": str(unit.id),
            "name": "Carlos Dias",
            "phone": "19911112222",
            "date_of_birth": "1988-04-12",
            "gender": "male",
            "address": ADDRESS,
            "emergency_contact": {"name": "Rita Dias", "phone": "19933334444", "relationship": "spouse"},
        },
        format="json",
    )
    assert res.status_code == 201, res.content
    body = res.json()
    assert body["unit_id"] == str(unit.id)
    assert body["emergency_contact"]["name"] == "Rita Dias"


def test_reception_cannot_register_in_another_unit(client_for, reception_user, second_unit):
    res = client_for(reception_user).post(URL, {"unit_id": str(second_unit.id), "name": "X"}, format="json")
    assert res.status_code == 403


def test_unknown_unit_is_a_validation_error(client_for, admin):
    res = client_for(admin).post(
        URL, {"unit_id": "00000000-0000-0000-0000-000000000000", "name": "X"}, format="json"
    )
    assert res.status_code == 400


def test_cpf_unique_per_organization(client_for, admin, unit, foreign_unit, patient, super_admin):
    res = client_for(admin).post(URL, {"unit_id": str(unit.id), "name": "Dup", "cpf": patient.cpf}, format="json")
    assert res.status_code == 400

    # same CPF in another organization is fine
    res = client_for(super_admin).post(
        URL, {"unit_id": str(foreign_unit.id), "name": "Other", "cpf": patient.cpf}, format="json"
    )
    assert res.status_code == 201

    # blank CPFs never collide
    for name in ("A", "B"):
        assert client_for(admin).post(URL, {"unit_id": str(unit.id), "name": name}, format="json").status_code == 201


def test_list_is_paginated_and_searchable(client_for, reception_user, patient, unit):
    Patient.objects.create(organization_id=unit.organization_id, unit_id=unit.id, name="Bruno Alves")

    body = client_for(reception_user).get(URL).json()
    assert body["count"] == 2

    body = client_for(reception_user).get(URL, {"q": "joana"}).json()
    assert [p["id"] for p in body["results"]] == [str(patient.id)]


def test_unit_user_lists_only_its_unit(client_for, reception_user, patient, second_unit):
    Patient.objects.create(organization_id=second_unit.organization_id, unit_id=second_unit.id, name="Norte")
    body = client_for(reception_user).get(URL).json()
    assert [p["id"] for p in body["results"]] == [str(patient.id)]


def test_update_and_delete_permissions(client_for, reception_user, admin, patient):
    c = client_for(reception_user)
    res = c.patch(f"{URL}{patient.id}/", {"phone": "19900000000"}, format="json")
    assert res.status_code == 200
    assert res.json()["phone"] == "19900000000"

    # the reception profile has no delete
    assert c.delete(f"{URL}{patient.id}/").status_code == 403
    assert client_for(admin).delete(f"{URL}{patient.id}/").status_code == 204


def test_other_organization_cannot_read(client_for, other_admin, patient):
    res = client_for(other_admin).get(f"{URL}{patient.id}/")
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Access denied to different organization"
