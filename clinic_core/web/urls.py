# clinic_core/web/urls.py
from django.urls import path

from clinic_core.web import views

app_name = "web"

org = "organizations/<uuid:organization_id>/"
unit = org + "units/<uuid:unit_id>/"

urlpatterns = [
    path(org + "dashboard/", views.dashboard, name="dashboard"),
    path(org + "units/", views.units, name="units"),
    path(org + "users/", views.users, name="users"),
    path(org + "profiles/", views.profiles, name="profiles"),
    path(org + "organizations/", views.organizations, name="organizations"),
    path(unit + "patients/", views.unit_patients, name="unit-patients"),
    path(unit + "appointments/", views.unit_appointments, name="unit-appointments"),
    path(unit + "doctors/", views.unit_doctors, name="unit-doctors"),
]
