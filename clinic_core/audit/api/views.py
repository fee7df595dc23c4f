# clinic_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from clinic_core.audit.api.serializers import AuditEventSerializer
from clinic_core.audit.models import AuditEvent
from clinic_core.audit.selectors import list_audit_events
from clinic_core.common.api.params import parse_optional_uuid
from clinic_core.iam.guards import AdminRequired, require_actor
from clinic_core.iam.roles import SystemRole

DEFAULT_LIMIT = 200
MAX_LIMIT = 500


def _int_param(raw, name: str, default=None):
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError({name: "Invalid integer."})


def _q(name, type_, description=""):
    return OpenApiParameter(name, type_, OpenApiParameter.QUERY, required=False, description=description)


class AuditEventViewSet(viewsets.GenericViewSet):
    """
    Audit trail of the caller's organization (super admins may pick any).
    """
    permission_classes = [AdminRequired]

    serializer_class = AuditEventSerializer
    queryset = AuditEvent.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditEventSerializer(many=True)},
        parameters=[
            _q("organization_id", OpenApiTypes.UUID, "Super admins only; admins always get their own organization."),
            _q("entity_type", OpenApiTypes.STR, "e.g. Profile, Account, Appointment"),
            _q("entity_id", OpenApiTypes.UUID),
            _q("event_code", OpenApiTypes.STR, "e.g. profile.updated, account.role_assigned"),
            _q("actor_user_id", OpenApiTypes.INT),
            _q("limit", OpenApiTypes.INT, f"Default {DEFAULT_LIMIT}, max {MAX_LIMIT}."),
        ],
    )
    def list(self, request):
        actor = require_actor(request)
        qp = request.query_params

        organization_id = actor.organization_id
        if actor.system_role == SystemRole.SUPER_ADMIN:
            organization_id = parse_optional_uuid(qp.get("organization_id"), "organization_id")

        limit = _int_param(qp.get("limit"), "limit", DEFAULT_LIMIT)
        qs = list_audit_events(
            organization_id=organization_id,
            entity_type=qp.get("entity_type") or None,
            entity_id=parse_optional_uuid(qp.get("entity_id"), "entity_id"),
            event_code=qp.get("event_code") or None,
            actor_user_id=_int_param(qp.get("actor_user_id"), "actor_user_id"),
        )[: max(1, min(limit, MAX_LIMIT))]

        return Response(AuditEventSerializer(qs, many=True).data, status=status.HTTP_200_OK)
