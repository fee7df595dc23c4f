# clinic_core/audit/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.audit.models import AuditEvent


class AuditEventSerializer(serializers.ModelSerializer):
    timestamp = serializers.DateTimeField(source="occurred_at", read_only=True)
    actor_user_id = serializers.IntegerField(read_only=True)
    actor_email = serializers.SerializerMethodField()

    class Meta:
        model = AuditEvent
        fields = [
            "id",
            "organization_id",
            "unit_id",
            "event_code",
            "entity_type",
            "entity_id",
            "actor_user_id",
            "actor_email",
            "timestamp",
            "metadata",
        ]
        read_only_fields = fields

    def get_actor_email(self, obj) -> str | None:
        # public bookings and deleted users leave no actor
        return obj.actor_user.email if obj.actor_user_id else None
