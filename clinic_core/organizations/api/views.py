# clinic_core/organizations/api/views.py
from __future__ import annotations

from uuid import UUID

from django.conf import settings
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinic_core.common.api.exceptions import Forbidden
from clinic_core.common.api.params import parse_pk
from clinic_core.iam.guards import ActorRequired, AdminRequired, SuperAdminRequired, require_actor, require_permission
from clinic_core.iam.permissions import same_id
from clinic_core.iam.roles import SystemRole
from clinic_core.organizations.api.serializers import (
    OrganizationCreateSerializer,
    OrganizationSerializer,
    OrganizationUpdateSerializer,
    SetActiveOrganizationSerializer,
)
from clinic_core.organizations.models import Organization
from clinic_core.organizations.selectors import (
    build_hierarchy,
    get_organization_or_none,
    organizations_visible_to,
)
from clinic_core.organizations.services import OrganizationService, OrganizationUpdate

NOT_FOUND = "Organization not found"


def _active_cookie_name() -> str:
    cfg = getattr(settings, "CLINIC_ADMIN", {}) or {}
    return cfg.get("ACTIVE_ORGANIZATION_COOKIE", "ca_active_org")


def _serialize(org: Organization) -> dict:
    return OrganizationSerializer(org).data


@extend_schema_view(
    list=extend_schema(tags=["Organizations"], responses={200: OrganizationSerializer(many=True)}),
    retrieve=extend_schema(tags=["Organizations"], responses={200: OrganizationSerializer}),
    create=extend_schema(tags=["Organizations"], request=OrganizationCreateSerializer, responses={201: OrganizationSerializer}),
    partial_update=extend_schema(
        tags=["Organizations"], request=OrganizationUpdateSerializer, responses={200: OrganizationSerializer}
    ),
    destroy=extend_schema(tags=["Organizations"], responses={204: None}),
    active=extend_schema(tags=["Organizations"], responses={200: OrganizationSerializer}),
    set_active=extend_schema(
        tags=["Organizations"], request=SetActiveOrganizationSerializer, responses={200: OrganizationSerializer}
    ),
)
class OrganizationViewSet(viewsets.ViewSet):
    """
    Tenant management. Listing is open to any organization member (own
    organization only); writes need an admin; deletion is super admin only.
    """
    permission_classes = [ActorRequired]

    serializer_class = OrganizationSerializer
    queryset = Organization.objects.none()

    def get_permissions(self):
        if self.action == "destroy":
            return [SuperAdminRequired()]
        if self.action in ("retrieve", "create", "partial_update", "set_active"):
            return [AdminRequired()]
        return super().get_permissions()

    def list(self, request):
        actor = require_actor(request)
        qs = organizations_visible_to(actor)
        return Response(build_hierarchy(qs, serialize=_serialize), status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        actor = require_actor(request)
        organization_id = parse_pk(pk, NOT_FOUND)

        if actor.system_role != SystemRole.SUPER_ADMIN and not same_id(actor.organization_id, organization_id):
            raise Forbidden("Insufficient permissions to read this organization")

        org = get_organization_or_none(organization_id=organization_id)
        if org is None:
            raise NotFound(NOT_FOUND)
        return Response(_serialize(org), status=status.HTTP_200_OK)

    def create(self, request):
        actor = require_actor(request)

        ser = OrganizationCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        parent_id = d.get("parent_id")
        if actor.system_role == SystemRole.ADMIN and not same_id(parent_id, actor.organization_id):
            raise Forbidden("Admin can only create organizations under their own organization")

        org = OrganizationService.create(
            actor_user_id=actor.user_id,
            name=d["name"],
            email=d["email"],
            phone=d["phone"],
            cnpj=d["cnpj"],
            address=dict(d["address"]),
            slug=d.get("slug"),
            logo=d.get("logo") or "",
            parent_id=parent_id,
        )
        return Response(_serialize(org), status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        organization_id = parse_pk(pk, NOT_FOUND)
        actor = require_permission(request, "organization", "update", organization_id=organization_id)

        ser = OrganizationUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        if actor.system_role == SystemRole.ADMIN and d.get("parent_id") is not None:
            raise Forbidden("Only super admins can move organizations")

        org = OrganizationService.update(
            actor_user_id=actor.user_id,
            organization_id=organization_id,
            patch=OrganizationUpdate(
                name=d.get("name"),
                slug=d.get("slug"),
                email=d.get("email"),
                phone=d.get("phone"),
                cnpj=d.get("cnpj"),
                logo=d.get("logo"),
                address=dict(d["address"]) if "address" in d else None,
                parent_id=d.get("parent_id"),
                clear_parent="parent_id" in d and d["parent_id"] is None and actor.system_role == SystemRole.SUPER_ADMIN,
            ),
        )
        return Response(_serialize(org), status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        actor = require_actor(request)
        OrganizationService.delete(actor_user_id=actor.user_id, organization_id=parse_pk(pk, NOT_FOUND))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request):
        actor = require_actor(request)

        organization_id = actor.organization_id
        if actor.system_role == SystemRole.SUPER_ADMIN:
            organization_id = request.COOKIES.get(_active_cookie_name()) or organization_id

        org = None
        if organization_id:
            try:
                org = get_organization_or_none(organization_id=UUID(str(organization_id)))
            except ValueError:
                org = None
        if org is None:
            raise NotFound(NOT_FOUND)
        return Response(_serialize(org), status=status.HTTP_200_OK)

    @action(detail=False, methods=["post"], url_path="set-active")
    def set_active(self, request):
        actor = require_actor(request)

        ser = SetActiveOrganizationSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        organization_id = ser.validated_data["organization_id"]

        if actor.system_role != SystemRole.SUPER_ADMIN and not same_id(actor.organization_id, organization_id):
            raise Forbidden("Cannot access this organization")

        org = get_organization_or_none(organization_id=organization_id)
        if org is None:
            raise NotFound(NOT_FOUND)

        res = Response(_serialize(org), status=status.HTTP_200_OK)
        res.set_cookie(_active_cookie_name(), str(org.id), httponly=True, samesite="Lax", path="/")
        return res
