# clinic_core/audit/tests/test_audit_api.py
import pytest

from clinic_core.audit.services import AuditService
from clinic_core.conftest import ADDRESS

pytestmark = pytest.mark.django_db

URL = "/api/v1/audit/events/"


def test_mutations_leave_audit_events(client_for, admin, org):
    c = client_for(admin)
    res = c.post(
        "/api/v1/units/",
        {"organization_id": str(org.id), "name": "Posto Sul", "phone": "1930000003", "address": ADDRESS},
        format="json",
    )
    assert res.status_code == 201, res.content

    events = c.get(URL, {"entity_type": "Unit"}).json()
    assert [e["event_code"] for e in events] == ["unit.created"]
    assert events[0]["entity_id"] == res.json()["id"]
    assert events[0]["actor_user_id"] == admin.user_id


def test_admin_sees_only_own_organization(client_for, admin, org, other_org):
    for o in (org, other_org):
        AuditService.log(
            event_code="organization.updated",
            entity_type="Organization",
            entity_id=o.id,
            organization_id=o.id,
            actor_user_id=None,
        )

    # organization_id is ignored for admins
    events = client_for(admin).get(URL, {"organization_id": str(other_org.id)}).json()
    assert {e["organization_id"] for e in events} == {str(org.id)}


def test_super_admin_can_pick_organization(client_for, super_admin, org, other_org):
    for o in (org, other_org):
        AuditService.log(
            event_code="organization.updated",
            entity_type="Organization",
            entity_id=o.id,
            organization_id=o.id,
            actor_user_id=None,
        )

    c = client_for(super_admin)
    assert len(c.get(URL).json()) == 2
    assert [e["organization_id"] for e in c.get(URL, {"organization_id": str(other_org.id)}).json()] == [
        str(other_org.id)
    ]


def test_limit(client_for, admin, org):
    for _ in range(3):
        AuditService.log(
            event_code="organization.updated",
            entity_type="Organization",
            entity_id=org.id,
            organization_id=org.id,
            actor_user_id=None,
        )

    c = client_for(admin)
    assert len(c.get(URL, {"limit": "2"}).json()) == 2
    assert c.get(URL, {"limit": "many"}).status_code == 400


def test_regular_users_cannot_read_audit(client_for, reception_user):
    assert client_for(reception_user).get(URL).status_code == 403
