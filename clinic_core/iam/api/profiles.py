# clinic_core/iam/api/profiles.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinic_core.common.api.exceptions import Forbidden
from clinic_core.common.api.params import parse_pk, parse_optional_uuid
from clinic_core.iam.api.serializers import ProfileCreateSerializer, ProfileSerializer, ProfileUpdateSerializer
from clinic_core.iam.guards import ActorRequired, require_actor
from clinic_core.iam.models import Profile
from clinic_core.iam.roles import SystemRole
from clinic_core.iam.selectors import profiles_visible_to
from clinic_core.iam.services.profiles import ProfileService, ProfileUpdate


def _require_profile_reader(request):
    actor = require_actor(request)
    if actor.system_role not in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN):
        raise Forbidden("Only admins can view profiles")
    return actor


@extend_schema_view(
    list=extend_schema(tags=["Profiles"], responses={200: ProfileSerializer(many=True)}),
    retrieve=extend_schema(tags=["Profiles"], responses={200: ProfileSerializer}),
    create=extend_schema(tags=["Profiles"], request=ProfileCreateSerializer, responses={201: ProfileSerializer}),
    partial_update=extend_schema(tags=["Profiles"], request=ProfileUpdateSerializer, responses={200: ProfileSerializer}),
    destroy=extend_schema(tags=["Profiles"], responses={204: None}),
)
class ProfileViewSet(viewsets.ViewSet):
    """
    Permission profiles. Visible to admins of the owning organization and to
    super admins; `user` accounts get 403.
    """
    permission_classes = [ActorRequired]

    serializer_class = ProfileSerializer
    queryset = Profile.objects.none()

    def list(self, request):
        actor = _require_profile_reader(request)
        qs = profiles_visible_to(actor)

        organization_id = parse_optional_uuid(request.query_params.get("organization_id"), "organization_id")
        if organization_id:
            qs = qs.filter(organization_id=organization_id)

        return Response(ProfileSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        actor = _require_profile_reader(request)
        obj = profiles_visible_to(actor).filter(id=parse_pk(pk, "Profile not found")).first()
        if obj is None:
            raise NotFound("Profile not found")
        return Response(ProfileSerializer(obj).data, status=status.HTTP_200_OK)

    def create(self, request):
        actor = require_actor(request)

        ser = ProfileCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        profile = ProfileService.create(
            actor=actor,
            organization_id=d["organization_id"],
            name=d["name"],
            description=d["description"],
            unit_id=d.get("unit_id"),
            permissions=[dict(p) for p in d.get("permissions") or []],
        )
        return Response(ProfileSerializer(profile).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        actor = require_actor(request)

        ser = ProfileUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        permissions = d.get("permissions")
        profile = ProfileService.update(
            actor=actor,
            profile_id=parse_pk(pk, "Profile not found"),
            patch=ProfileUpdate(
                name=d.get("name"),
                description=d.get("description"),
                permissions=[dict(p) for p in permissions] if permissions is not None else None,
                unit_id=d.get("unit_id"),
                clear_unit="unit_id" in d and d["unit_id"] is None,
            ),
        )
        return Response(ProfileSerializer(profile).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        actor = require_actor(request)
        ProfileService.delete(actor=actor, profile_id=parse_pk(pk, "Profile not found"))
        return Response(status=status.HTTP_204_NO_CONTENT)
