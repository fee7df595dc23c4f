# clinic_core/appointments/tests/test_appointments_api.py
from datetime import timedelta

import pytest
from django.utils import timezone

from clinic_core.appointments.models import Appointment, AppointmentStatus
from clinic_core.audit.models import AuditEvent
from clinic_core.doctors.models import Doctor
from clinic_core.iam.models import Profile
from clinic_core.patients.models import Patient

pytestmark = pytest.mark.django_db

URL = "/api/v1/appointments/"


@pytest.fixture
def doctor(unit):
    return Doctor.objects.create(organization_id=unit.organization_id, unit_id=unit.id, name="Dr. Paulo", crm="A-1")


@pytest.fixture
def patient(unit):
    return Patient.objects.create(
        organization_id=unit.organization_id, unit_id=unit.id, name="Joana Pereira", phone="19988887777"
    )


@pytest.fixture
def slot():
    return (timezone.now() + timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)


def book(client, unit, doctor, when, **extra):
    data = {"unit_id": str(unit.id), "doctor_id": str(doctor.id), "date_time": when.isoformat()}
    data.update(extra)
    return client.post(URL, data, format="json")


def test_reception_books_for_registered_patient(client_for, reception_user, unit, doctor, patient, slot):
    res = book(client_for(reception_user), unit, doctor, slot, patient_id=str(patient.id))
    assert res.status_code == 201, res.content

    body = res.json()
    assert body["status"] == "scheduled"
    assert body["patient_name"] == patient.name
    assert body["doctor_name"] == doctor.name
    assert body["duration_minutes"] == 30


def test_cannot_link_patient_from_another_unit(client_for, reception_user, unit, second_unit, doctor, slot):
    elsewhere = Patient.objects.create(
        organization_id=second_unit.organization_id,
        unit_id=second_unit.id,
        name="Marta Norte",
        phone="19911112222",
    )
    c = client_for(reception_user)
    assert c.get(f"/api/v1/patients/{elsewhere.id}/").status_code == 403

    res = book(c, unit, doctor, slot, patient_id=str(elsewhere.id))
    assert res.status_code == 400
    assert "patient_id" in res.json()["error"]["details"]
    assert not Appointment.objects.filter(patient=elsewhere).exists()


def test_reschedule_cannot_link_patient_from_another_unit(client_for, admin, unit, second_unit, doctor, slot):
    elsewhere = Patient.objects.create(
        organization_id=second_unit.organization_id, unit_id=second_unit.id, name="Marta Norte"
    )
    c = client_for(admin)
    appt = book(c, unit, doctor, slot, patient_name="Walk-in").json()

    res = c.patch(f"{URL}{appt['id']}/", {"patient_id": str(elsewhere.id)}, format="json")
    assert res.status_code == 400


def test_patient_name_or_id_required(client_for, admin, unit, doctor, slot):
    assert book(client_for(admin), unit, doctor, slot).status_code == 400


def test_doctor_must_belong_to_unit(client_for, admin, unit, second_unit, slot):
    other = Doctor.objects.create(
        organization_id=second_unit.organization_id, unit_id=second_unit.id, name="Dr. Norte", crm="N-1"
    )
    res = book(client_for(admin), unit, other, slot, patient_name="Walk-in")
    assert res.status_code == 400


def test_overlapping_bookings_are_rejected(client_for, admin, unit, doctor, slot):
    c = client_for(admin)
    assert book(c, unit, doctor, slot, patient_name="First").status_code == 201

    res = book(c, unit, doctor, slot + timedelta(minutes=15), patient_name="Second")
    assert res.status_code == 400
    assert "date_time" in res.json()["error"]["details"]

    # back to back is fine
    assert book(c, unit, doctor, slot + timedelta(minutes=30), patient_name="Third").status_code == 201


def test_cancelled_slot_can_be_rebooked(client_for, admin, unit, doctor, slot):
    c = client_for(admin)
    first = book(c, unit, doctor, slot, patient_name="First").json()
    c.post(f"{URL}{first['id']}/set-status/", {"status": "cancelled"}, format="json")

    assert book(c, unit, doctor, slot, patient_name="Again").status_code == 201


def test_filters(client_for, admin, unit, doctor, slot):
    c = client_for(admin)
    early = book(c, unit, doctor, slot, patient_name="Early").json()
    late = book(c, unit, doctor, slot + timedelta(days=3), patient_name="Late").json()
    c.post(f"{URL}{late['id']}/set-status/", {"status": "confirmed"}, format="json")

    assert [a["id"] for a in c.get(URL, {"status": "confirmed"}).json()] == [late["id"]]
    assert [a["id"] for a in c.get(URL, {"date_to": (slot + timedelta(days=1)).isoformat()}).json()] == [early["id"]]
    assert len(c.get(URL, {"doctor": str(doctor.id)}).json()) == 2

    res = c.get(URL, {"status": "lost"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "validation_error"


def test_status_transitions(client_for, admin, unit, doctor, slot):
    c = client_for(admin)
    appt = book(c, unit, doctor, slot, patient_name="Walk-in").json()
    url = f"{URL}{appt['id']}/set-status/"

    assert c.post(url, {"status": "confirmed"}, format="json").json()["status"] == "confirmed"
    assert c.post(url, {"status": "completed"}, format="json").status_code == 200

    res = c.post(url, {"status": "scheduled"}, format="json")
    assert res.status_code == 400
    assert AuditEvent.objects.filter(event_code="appointment.status_changed", entity_id=appt["id"]).count() == 2


def test_set_status_requires_update_permission(client_for, make_account, org, unit, doctor, slot, admin):
    viewer = make_account(
        "user",
        organization=org,
        unit=unit,
        profile=Profile.objects.create(
            organization=org,
            name="Viewer",
            permissions=[{"resource": "appointment", "actions": ["read"], "scope": "unit"}],
        ),
    )
    appt = book(client_for(admin), unit, doctor, slot, patient_name="Walk-in").json()

    c = client_for(viewer)
    assert c.get(f"{URL}{appt['id']}/").status_code == 200
    assert c.post(f"{URL}{appt['id']}/set-status/", {"status": "confirmed"}, format="json").status_code == 403


def test_update_reschedules(client_for, reception_user, unit, doctor, slot, admin):
    appt = book(client_for(admin), unit, doctor, slot, patient_name="Walk-in").json()
    later = slot + timedelta(hours=2)

    res = client_for(reception_user).patch(f"{URL}{appt['id']}/", {"date_time": later.isoformat()}, format="json")
    assert res.status_code == 200
    assert Appointment.objects.get(id=appt["id"]).date_time == later


def test_other_organization_is_denied(client_for, other_admin, admin, unit, doctor, slot):
    appt = book(client_for(admin), unit, doctor, slot, patient_name="Walk-in").json()
    assert client_for(other_admin).get(f"{URL}{appt['id']}/").status_code == 403
    assert client_for(other_admin).get(URL).json() == []


def test_public_booking(anon_client, unit, doctor, slot):
    res = anon_client.post(
        f"{URL}public/",
        {
            "unit_id": str(unit.id),
            "doctor_id": str(doctor.id),
            "patient_name": "Visitante",
            "patient_phone": "19955554444",
            "date_time": slot.isoformat(),
        },
        format="json",
    )
    assert res.status_code == 201, res.content

    appt = Appointment.objects.get(id=res.json()["id"])
    assert appt.status == AppointmentStatus.SCHEDULED
    assert appt.patient_id is None
    assert AuditEvent.objects.get(event_code="appointment.created", entity_id=appt.id).actor_user_id is None


def test_public_booking_rejects_past_and_inactive(anon_client, unit, doctor, slot):
    base = {"unit_id": str(unit.id), "doctor_id": str(doctor.id), "patient_name": "V", "patient_phone": "1"}

    past = {**base, "date_time": (timezone.now() - timedelta(hours=1)).isoformat()}
    assert anon_client.post(f"{URL}public/", past, format="json").status_code == 400

    doctor.is_active = False
    doctor.save(update_fields=["is_active"])
    res = anon_client.post(f"{URL}public/", {**base, "date_time": slot.isoformat()}, format="json")
    assert res.status_code == 400


def test_public_booking_can_be_disabled(anon_client, settings, unit, doctor, slot):
    settings.CLINIC_ADMIN = {**settings.CLINIC_ADMIN, "PUBLIC_BOOKING_ENABLED": False}
    res = anon_client.post(
        f"{URL}public/",
        {
            "unit_id": str(unit.id),
            "doctor_id": str(doctor.id),
            "patient_name": "V",
            "patient_phone": "1",
            "date_time": slot.isoformat(),
        },
        format="json",
    )
    assert res.status_code == 404


def test_doctor_with_appointments_cannot_be_deleted(client_for, admin, unit, doctor, slot):
    book(client_for(admin), unit, doctor, slot, patient_name="Walk-in")
    res = client_for(admin).delete(f"/api/v1/doctors/{doctor.id}/")
    assert res.status_code == 400
