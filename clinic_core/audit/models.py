# clinic_core/audit/models.py
import uuid

from django.conf import settings
from django.db import models


class AuditEvent(models.Model):
    """
    Immutable record of an administrative mutation.

    Scope columns are plain UUIDs so events outlive the organization or unit
    they describe.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.UUIDField(db_index=True)
    unit_id = models.UUIDField(null=True, blank=True, db_index=True)

    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "profile.updated"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "Profile"
    entity_id = models.UUIDField(db_index=True)

    actor_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="audit_events",
        null=True,
        blank=True,
    )

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["organization_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["organization_id", "event_code"]),
        ]

    def __str__(self) -> str:
        return f"{self.event_code} {self.entity_type}:{self.entity_id}"
