# clinic_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from clinic_core.appointments.api.views import AppointmentViewSet
from clinic_core.audit.api.views import AuditEventViewSet
from clinic_core.doctors.api.views import DoctorViewSet
from clinic_core.iam.api.auth import LoginView, LogoutView, RefreshView
from clinic_core.iam.api.me import MePermissionsView, MeView, NavigationView, RolesView
from clinic_core.iam.api.profiles import ProfileViewSet
from clinic_core.iam.api.users import UserViewSet
from clinic_core.organizations.api.views import OrganizationViewSet
from clinic_core.patients.api.views import PatientViewSet
from clinic_core.units.api.views import UnitViewSet

router = DefaultRouter()

# ViewSet-backed modules (centralized)
router.register(r"profiles", ProfileViewSet, basename="profiles")
router.register(r"users", UserViewSet, basename="users")
router.register(r"organizations", OrganizationViewSet, basename="organizations")
router.register(r"units", UnitViewSet, basename="units")
router.register(r"doctors", DoctorViewSet, basename="doctors")
router.register(r"patients", PatientViewSet, basename="patients")
router.register(r"appointments", AppointmentViewSet, basename="appointments")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth + current actor
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),
    path("me/permissions/", MePermissionsView.as_view(), name="me-permissions"),
    path("roles/", RolesView.as_view(), name="roles"),
    path("navigation/", NavigationView.as_view(), name="navigation"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
