# clinic_core/iam/api/me.py

from __future__ import annotations

from django.conf import settings
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from clinic_core.iam.api.schema_serializers import (
    MeResponseSerializer,
    NavigationItemSerializer,
    PermissionEntrySerializer,
    RoleDescriptionSerializer,
)
from clinic_core.iam.guards import ActorRequired, require_actor
from clinic_core.iam.permissions import Actor, get_user_permissions
from clinic_core.iam.roles import describe_roles, role_summary
from clinic_core.iam.routes import get_accessible_routes, navigation_for


def actor_payload(actor: Actor) -> dict:
    def _str(v):
        return str(v) if v else None

    return {
        "id": str(actor.id),
        "email": actor.email,
        "name": actor.name,
        "system_role": str(actor.system_role),
        "organization_id": _str(actor.organization_id),
        "unit_id": _str(actor.unit_id),
        "profile_id": _str(actor.profile_id),
    }


def permissions_payload(actor: Actor) -> list[dict]:
    return [p.to_dict() for p in get_user_permissions(actor)]


class MeView(APIView):
    """
    The current actor, its effective permissions and the pages it may open.
    """
    permission_classes = [ActorRequired]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        actor = require_actor(request)
        cfg = getattr(settings, "CLINIC_ADMIN", {}) or {}
        return Response(
            {
                "user": actor_payload(actor),
                "permissions": permissions_payload(actor),
                "role_summary": role_summary(actor.system_role),
                "accessible_routes": get_accessible_routes(actor),
                "server_time": timezone.now(),
                "api_version": cfg.get("API_VERSION", "1.0.0"),
            },
            status=status.HTTP_200_OK,
        )


class MePermissionsView(APIView):
    permission_classes = [ActorRequired]

    @extend_schema(responses={200: PermissionEntrySerializer(many=True)}, tags=["IAM"])
    def get(self, request):
        actor = require_actor(request)
        return Response(permissions_payload(actor), status=status.HTTP_200_OK)


class RolesView(APIView):
    permission_classes = [ActorRequired]

    @extend_schema(responses={200: RoleDescriptionSerializer(many=True)}, tags=["IAM"])
    def get(self, request):
        return Response(describe_roles(), status=status.HTTP_200_OK)


class NavigationView(APIView):
    permission_classes = [ActorRequired]

    @extend_schema(responses={200: NavigationItemSerializer(many=True)}, tags=["IAM"])
    def get(self, request):
        actor = require_actor(request)
        items = navigation_for(
            actor,
            organization_id=request.query_params.get("organization_id") or None,
            unit_id=request.query_params.get("unit_id") or None,
        )
        return Response(items, status=status.HTTP_200_OK)
