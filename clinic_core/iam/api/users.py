# clinic_core/iam/api/users.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.response import Response

from clinic_core.common.api.exceptions import Forbidden
from clinic_core.common.api.pagination import UserListPagination, paginate
from clinic_core.common.api.params import parse_optional_uuid, parse_pk
from clinic_core.iam.api.serializers import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    AssignRoleSerializer,
)
from clinic_core.iam.guards import ActorRequired, SuperAdminRequired, require_actor, require_permission
from clinic_core.iam.models import Account
from clinic_core.iam.permissions import can_access_resource, same_id
from clinic_core.iam.roles import SystemRole
from clinic_core.iam.selectors import (
    account_qs,
    accounts_for_organization,
    accounts_for_unit,
    accounts_visible_to,
    get_account_or_none,
)
from clinic_core.iam.services.accounts import AccountService, AccountUpdate
from clinic_core.units.selectors import get_unit_or_none

NOT_FOUND = "User not found"


def _get_account_or_404(pk) -> Account:
    account = get_account_or_none(account_id=parse_pk(pk, NOT_FOUND))
    if account is None:
        raise NotFound(NOT_FOUND)
    return account


@extend_schema_view(
    list=extend_schema(
        tags=["Users"],
        responses={200: AccountSerializer(many=True)},
        parameters=[OpenApiParameter("unit_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False)],
    ),
    retrieve=extend_schema(tags=["Users"], responses={200: AccountSerializer}),
    create=extend_schema(tags=["Users"], request=AccountCreateSerializer, responses={201: AccountSerializer}),
    partial_update=extend_schema(tags=["Users"], request=AccountUpdateSerializer, responses={200: AccountSerializer}),
    destroy=extend_schema(tags=["Users"], responses={204: None}),
    list_all=extend_schema(tags=["Users"], responses={200: AccountSerializer(many=True)}),
    by_organization=extend_schema(
        tags=["Users"],
        responses={200: AccountSerializer(many=True)},
        parameters=[OpenApiParameter("organization_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=True)],
    ),
    by_unit=extend_schema(
        tags=["Users"],
        responses={200: AccountSerializer(many=True)},
        parameters=[OpenApiParameter("unit_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=True)],
    ),
    assign_role=extend_schema(tags=["Users"], request=AssignRoleSerializer, responses={200: AccountSerializer}),
)
class UserViewSet(viewsets.ViewSet):
    """
    Clinic user accounts. Organization boundaries are enforced per action;
    role changes always go through can_assign_role.
    """
    permission_classes = [ActorRequired]

    serializer_class = AccountSerializer
    queryset = Account.objects.none()

    def get_permissions(self):
        if self.action == "list_all":
            return [SuperAdminRequired()]
        return super().get_permissions()

    def list(self, request):
        actor = require_actor(request)
        if actor.system_role == SystemRole.USER:
            require_permission(request, "user", "read", organization_id=actor.organization_id)

        unit_id = parse_optional_uuid(request.query_params.get("unit_id"), "unit_id")
        qs = accounts_visible_to(actor, unit_id=unit_id)
        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        actor = require_actor(request)
        account = _get_account_or_404(pk)

        if actor.system_role == SystemRole.ADMIN:
            if not same_id(account.organization_id, actor.organization_id):
                raise Forbidden("Cannot access user from different organization")
        elif actor.system_role != SystemRole.SUPER_ADMIN and not same_id(account.id, actor.id):
            decision = can_access_resource(
                actor,
                "user",
                "read",
                organization_id=account.organization_id,
                unit_id=account.unit_id,
                owner_id=account.id,
            )
            if not decision.allowed:
                raise Forbidden("Cannot access other users")

        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    def create(self, request):
        actor = require_actor(request)

        ser = AccountCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        organization_id = d.get("organization_id")
        if organization_id is None and actor.system_role == SystemRole.ADMIN:
            organization_id = actor.organization_id

        account = AccountService.create(
            actor=actor,
            email=d["email"],
            password=d["password"],
            full_name=d["full_name"],
            organization_id=organization_id,
            system_role=d["system_role"],
            unit_id=d.get("unit_id"),
            profile_id=d.get("profile_id"),
        )
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        actor = require_actor(request)

        ser = AccountUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        account = AccountService.update(
            actor=actor,
            account_id=parse_pk(pk, NOT_FOUND),
            patch=AccountUpdate(
                full_name=d.get("full_name"),
                email=d.get("email"),
                password=d.get("password"),
                system_role=d.get("system_role"),
                organization_id=d.get("organization_id"),
                unit_id=d.get("unit_id"),
                clear_unit="unit_id" in d and d["unit_id"] is None,
                profile_id=d.get("profile_id"),
                clear_profile="profile_id" in d and d["profile_id"] is None,
                is_active=d.get("is_active"),
            ),
        )
        account = account_qs().get(id=account.id)
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        actor = require_actor(request)
        AccountService.delete(actor=actor, account_id=parse_pk(pk, NOT_FOUND))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], url_path="list-all")
    def list_all(self, request):
        qs = account_qs().order_by("full_name", "user__email")
        return paginate(request, qs, AccountSerializer, paginator=UserListPagination())

    @action(detail=False, methods=["get"], url_path="by-organization")
    def by_organization(self, request):
        actor = require_actor(request)
        organization_id = parse_optional_uuid(request.query_params.get("organization_id"), "organization_id")
        if organization_id is None:
            raise ValidationError({"organization_id": "This query parameter is required."})

        if actor.system_role != SystemRole.SUPER_ADMIN and not same_id(actor.organization_id, organization_id):
            raise Forbidden("Insufficient permissions to read users from this organization")

        qs = accounts_for_organization(organization_id=organization_id)
        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=["get"], url_path="by-unit")
    def by_unit(self, request):
        actor = require_actor(request)
        unit_id = parse_optional_uuid(request.query_params.get("unit_id"), "unit_id")
        if unit_id is None:
            raise ValidationError({"unit_id": "This query parameter is required."})

        allowed = actor.system_role == SystemRole.SUPER_ADMIN or same_id(actor.unit_id, unit_id)
        if not allowed and actor.system_role == SystemRole.ADMIN:
            # admins may read any unit of their own organization
            allowed = get_unit_or_none(unit_id=unit_id, organization_id=actor.organization_id) is not None
        if not allowed:
            raise Forbidden("Insufficient permissions to read users from this unit")

        qs = accounts_for_unit(unit_id=unit_id)
        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @action(detail=True, methods=["post"], url_path="assign-role")
    def assign_role(self, request, pk=None):
        actor = require_actor(request)

        ser = AssignRoleSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        account = AccountService.assign_role(
            actor=actor,
            account_id=parse_pk(pk, NOT_FOUND),
            system_role=ser.validated_data["system_role"],
            profile_id=ser.validated_data.get("profile_id"),
        )
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)
