# clinic_core/units/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from clinic_core.common.api.params import parse_optional_uuid, parse_pk
from clinic_core.iam.guards import ActorRequired, AdminRequired, require_permission
from clinic_core.units.api.serializers import UnitCreateSerializer, UnitSerializer, UnitUpdateSerializer
from clinic_core.units.models import Unit
from clinic_core.units.selectors import get_unit_or_none, units_for_organization, units_visible_to
from clinic_core.units.services import UnitService, UnitUpdate

NOT_FOUND = "Unit not found"

_ORG_PARAM = OpenApiParameter("organization_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False)


def _get_unit_or_404(pk) -> Unit:
    unit = get_unit_or_none(unit_id=parse_pk(pk, NOT_FOUND))
    if unit is None:
        raise NotFound(NOT_FOUND)
    return unit


@extend_schema_view(
    list=extend_schema(tags=["Units"], parameters=[_ORG_PARAM], responses={200: UnitSerializer(many=True)}),
    retrieve=extend_schema(tags=["Units"], responses={200: UnitSerializer}),
    create=extend_schema(tags=["Units"], request=UnitCreateSerializer, responses={201: UnitSerializer}),
    partial_update=extend_schema(tags=["Units"], request=UnitUpdateSerializer, responses={200: UnitSerializer}),
    destroy=extend_schema(tags=["Units"], responses={204: None}),
    by_organization=extend_schema(tags=["Units"], parameters=[_ORG_PARAM], responses={200: UnitSerializer(many=True)}),
)
class UnitViewSet(viewsets.ViewSet):
    """
    Health posts. Every check targets the unit's organization so an admin
    never reaches another tenant's units.
    """
    permission_classes = [ActorRequired]

    serializer_class = UnitSerializer
    queryset = Unit.objects.none()

    def get_permissions(self):
        if self.action == "create":
            return [AdminRequired()]
        return super().get_permissions()

    def list(self, request):
        actor = require_permission(request, "unit", "read")
        organization_id = parse_optional_uuid(request.query_params.get("organization_id"), "organization_id")
        qs = units_visible_to(actor, organization_id=organization_id)
        return Response(UnitSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        unit = _get_unit_or_404(pk)
        require_permission(request, "unit", "read", organization_id=unit.organization_id)
        return Response(UnitSerializer(unit).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = UnitCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        actor = require_permission(request, "unit", "create", organization_id=d["organization_id"])

        unit = UnitService.create(
            actor_user_id=actor.user_id,
            organization_id=d["organization_id"],
            name=d["name"],
            phone=d["phone"],
            email=d.get("email") or "",
            manager=d.get("manager") or "",
            specialties=d.get("specialties") or [],
            address=dict(d["address"]),
        )
        return Response(UnitSerializer(unit).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        unit = _get_unit_or_404(pk)
        actor = require_permission(request, "unit", "update", organization_id=unit.organization_id)

        ser = UnitUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        unit = UnitService.update(
            actor_user_id=actor.user_id,
            unit_id=unit.id,
            patch=UnitUpdate(
                name=d.get("name"),
                phone=d.get("phone"),
                email=d.get("email"),
                manager=d.get("manager"),
                specialties=d.get("specialties"),
                address=dict(d["address"]) if "address" in d else None,
            ),
        )
        return Response(UnitSerializer(unit).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        unit = _get_unit_or_404(pk)
        actor = require_permission(request, "unit", "delete", organization_id=unit.organization_id)
        UnitService.delete(actor_user_id=actor.user_id, unit_id=unit.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="by-organization")
    def by_organization(self, request):
        organization_id = parse_optional_uuid(request.query_params.get("organization_id"), "organization_id")
        if organization_id is None:
            raise ValidationError({"organization_id": "This query parameter is required."})

        require_permission(request, "unit", "read", organization_id=organization_id)
        qs = units_for_organization(organization_id=organization_id)
        return Response(UnitSerializer(qs, many=True).data, status=status.HTTP_200_OK)
