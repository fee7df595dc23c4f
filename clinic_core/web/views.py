# clinic_core/web/views.py
from __future__ import annotations

from django.http import Http404
from django.shortcuts import render

from clinic_core.appointments.models import Appointment
from clinic_core.doctors.models import Doctor
from clinic_core.iam.routes import ORG, UNIT, navigation_for
from clinic_core.iam.selectors import accounts_for_organization, profiles_visible_to
from clinic_core.organizations.selectors import get_organization_or_none, organizations_visible_to
from clinic_core.patients.models import Patient
from clinic_core.units.selectors import get_unit_or_none, units_for_organization
from clinic_core.web.guards import guarded_page


def _context(actor, organization_id, unit_id=None, **extra) -> dict:
    organization = get_organization_or_none(organization_id=organization_id)
    if organization is None:
        raise Http404("Organization not found")

    unit = None
    if unit_id is not None:
        unit = get_unit_or_none(unit_id=unit_id, organization_id=organization_id)
        if unit is None:
            raise Http404("Unit not found")

    return {
        "actor": actor,
        "organization": organization,
        "unit": unit,
        "navigation": navigation_for(actor, organization_id=organization_id, unit_id=unit_id),
        **extra,
    }


@guarded_page(ORG + "/dashboard")
def dashboard(request, organization_id, *, actor):
    unit_scope = {"organization_id": organization_id}
    stats = {
        "units": units_for_organization(organization_id=organization_id).count(),
        "doctors": Doctor.objects.filter(**unit_scope, is_active=True).count(),
        "patients": Patient.objects.filter(**unit_scope).count(),
        "appointments": Appointment.objects.filter(**unit_scope).count(),
    }
    return render(request, "web/dashboard.html", _context(actor, organization_id, stats=stats))


@guarded_page(ORG + "/units")
def units(request, organization_id, *, actor):
    rows = [
        (u.name, u.phone, u.manager)
        for u in units_for_organization(organization_id=organization_id)
    ]
    ctx = _context(actor, organization_id, title="Units", columns=["Name", "Phone", "Manager"], rows=rows)
    return render(request, "web/list.html", ctx)


@guarded_page(ORG + "/users")
def users(request, organization_id, *, actor):
    rows = [
        (a.full_name, a.email, a.get_system_role_display())
        for a in accounts_for_organization(organization_id=organization_id)
    ]
    ctx = _context(actor, organization_id, title="Users", columns=["Name", "Email", "Role"], rows=rows)
    return render(request, "web/list.html", ctx)


@guarded_page(ORG + "/profiles")
def profiles(request, organization_id, *, actor):
    rows = [
        (p.name, p.description, len(p.permissions or []))
        for p in profiles_visible_to(actor).filter(organization_id=organization_id)
    ]
    ctx = _context(actor, organization_id, title="Profiles", columns=["Name", "Description", "Permissions"], rows=rows)
    return render(request, "web/list.html", ctx)


@guarded_page(ORG + "/organizations")
def organizations(request, organization_id, *, actor):
    rows = [(o.name, o.email, o.phone) for o in organizations_visible_to(actor)]
    ctx = _context(actor, organization_id, title="Organizations", columns=["Name", "Email", "Phone"], rows=rows)
    return render(request, "web/list.html", ctx)


@guarded_page(UNIT + "/patients")
def unit_patients(request, organization_id, unit_id, *, actor):
    rows = [
        (p.name, p.phone, p.date_of_birth or "")
        for p in Patient.objects.filter(organization_id=organization_id, unit_id=unit_id).order_by("name")
    ]
    ctx = _context(
        actor, organization_id, unit_id, title="Patients", columns=["Name", "Phone", "Date of birth"], rows=rows
    )
    return render(request, "web/list.html", ctx)


@guarded_page(UNIT + "/appointments")
def unit_appointments(request, organization_id, unit_id, *, actor):
    qs = (
        Appointment.objects.select_related("doctor")
        .filter(organization_id=organization_id, unit_id=unit_id)
        .order_by("date_time")
    )
    rows = [(a.date_time, a.patient_name, a.doctor.name, a.get_status_display()) for a in qs]
    ctx = _context(
        actor,
        organization_id,
        unit_id,
        title="Appointments",
        columns=["When", "Patient", "Doctor", "Status"],
        rows=rows,
    )
    return render(request, "web/list.html", ctx)


@guarded_page(UNIT + "/doctors")
def unit_doctors(request, organization_id, unit_id, *, actor):
    rows = [
        (d.name, d.crm, ", ".join(d.specialties or []))
        for d in Doctor.objects.filter(organization_id=organization_id, unit_id=unit_id).order_by("name")
    ]
    ctx = _context(actor, organization_id, unit_id, title="Doctors", columns=["Name", "CRM", "Specialties"], rows=rows)
    return render(request, "web/list.html", ctx)
