# clinic_core/conftest.py
import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from clinic_core.iam.models import Account, Profile
from clinic_core.iam.permissions import Actor, Permission
from clinic_core.iam.roles import SystemRole
from clinic_core.organizations.models import Organization
from clinic_core.units.models import Unit

ADDRESS = {
    "street": "Rua das Flores",
    "number": "100",
    "complement": "",
    "neighborhood": "Centro",
    "city": "Campinas",
    "state": "SP",
    "zip_code": "13010-000",
}


def make_actor(role=SystemRole.USER, *, organization_id="org-1", unit_id=None, permissions=None, **kw):
    """
    In-memory Actor for evaluator tests. `permissions` takes plain dicts.
    """
    perms = None
    if permissions is not None:
        perms = tuple(Permission.from_dict(p) for p in permissions)
    return Actor(
        id=kw.pop("id", "acc-1"),
        system_role=role,
        organization_id=organization_id,
        unit_id=unit_id,
        permissions=perms,
        **kw,
    )


@pytest.fixture
def org(db):
    return Organization.objects.create(name="Clinica Vida", email="contato@vida.test", address=ADDRESS)


@pytest.fixture
def other_org(db):
    return Organization.objects.create(name="Clinica Sol", email="contato@sol.test", address=ADDRESS)


@pytest.fixture
def unit(org):
    return Unit.objects.create(organization=org, name="Posto Centro", phone="1930000000", address=ADDRESS)


@pytest.fixture
def second_unit(org):
    return Unit.objects.create(organization=org, name="Posto Norte", phone="1930000001", address=ADDRESS)


@pytest.fixture
def foreign_unit(other_org):
    return Unit.objects.create(organization=other_org, name="Posto Sol", phone="1930000002", address=ADDRESS)


@pytest.fixture
def make_account(db):
    User = get_user_model()
    counter = {"n": 0}

    def _make(role=SystemRole.USER, *, organization=None, unit=None, profile=None, email=None, password="pass12345"):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@clinic.test"
        user = User.objects.create_user(username=email, email=email, password=password)
        return Account.objects.create(
            user=user,
            full_name=f"{role.title()} {counter['n']}",
            system_role=role,
            organization=organization,
            unit=unit,
            profile=profile,
        )

    return _make


@pytest.fixture
def super_admin(make_account):
    return make_account(SystemRole.SUPER_ADMIN)


@pytest.fixture
def admin(make_account, org):
    return make_account(SystemRole.ADMIN, organization=org)


@pytest.fixture
def other_admin(make_account, other_org):
    return make_account(SystemRole.ADMIN, organization=other_org)


@pytest.fixture
def plain_user(make_account, org, unit):
    """`user` account without a profile (dashboard fallback only)."""
    return make_account(SystemRole.USER, organization=org, unit=unit)


@pytest.fixture
def reception_profile(org):
    return Profile.objects.create(
        organization=org,
        name="Reception",
        description="Front desk",
        permissions=[
            {"resource": "dashboard", "actions": ["read"], "scope": "organization"},
            {"resource": "patient", "actions": ["create", "read", "update"], "scope": "unit"},
            {"resource": "appointment", "actions": ["create", "read", "update"], "scope": "unit"},
            {"resource": "doctor", "actions": ["read"], "scope": "unit"},
        ],
    )


@pytest.fixture
def reception_user(make_account, org, unit, reception_profile):
    return make_account(SystemRole.USER, organization=org, unit=unit, profile=reception_profile)


@pytest.fixture
def client_for():
    def _client(account):
        c = APIClient()
        c.force_authenticate(user=account.user)
        return c

    return _client


@pytest.fixture
def anon_client():
    return APIClient()
