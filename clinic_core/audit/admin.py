# clinic_core/audit/admin.py
from django.contrib import admin

from clinic_core.audit.models import AuditEvent


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    """Read-only: events are written by the services, never by hand."""

    list_display = ("occurred_at", "event_code", "entity_type", "entity_id", "organization_id", "actor_user")
    list_filter = ("event_code", "entity_type")
    search_fields = ("event_code", "entity_id", "organization_id", "actor_user__email")
    date_hierarchy = "occurred_at"
    ordering = ("-occurred_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
