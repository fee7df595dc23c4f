# clinic_core/audit/services.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Optional
from uuid import UUID

from django.db import transaction

from clinic_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    organization_id: UUID
    unit_id: Optional[UUID] = None
    actor_user_id: Optional[int] = None
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditService:
    """
    Append-only trail of administrative mutations. Services call log() inside
    their own transaction, so an event exists only if the mutation commits.
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        organization_id: UUID,
        actor_user_id: int | None,
        metadata: Optional[dict[str, Any]] = None,
        unit_id: UUID | None = None,
    ) -> AuditRecord:
        record = AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            organization_id=organization_id,
            unit_id=unit_id,
            actor_user_id=actor_user_id,
            metadata=metadata or {},
        )
        AuditEvent.objects.create(**asdict(record))
        logger.debug("audit %s %s:%s org=%s", event_code, entity_type, entity_id, organization_id)
        return record
