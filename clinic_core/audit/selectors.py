# clinic_core/audit/selectors.py
from __future__ import annotations

from uuid import UUID

from django.db.models import QuerySet

from clinic_core.audit.models import AuditEvent


def list_audit_events(
    *,
    organization_id: UUID | None,
    unit_id: UUID | None = None,
    entity_type: str | None = None,
    entity_id: UUID | None = None,
    event_code: str | None = None,
    actor_user_id: int | None = None,
) -> QuerySet[AuditEvent]:
    """
    Newest first. organization_id=None spans every organization, which only
    the super admin listing asks for.
    """
    filters = {
        "organization_id": organization_id,
        "unit_id": unit_id,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "event_code": event_code,
    }
    qs = AuditEvent.objects.select_related("actor_user").filter(**{k: v for k, v in filters.items() if v})
    if actor_user_id is not None:
        qs = qs.filter(actor_user_id=actor_user_id)
    return qs.order_by("-occurred_at")
