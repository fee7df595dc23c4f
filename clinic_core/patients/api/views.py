# clinic_core/patients/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinic_core.common.api.pagination import paginate
from clinic_core.common.api.params import parse_optional_uuid, parse_pk
from clinic_core.common.scoping import resolve_unit
from clinic_core.iam.guards import ActorRequired, require_actor, require_permission, resource_guard
from clinic_core.patients.api.serializers import (
    PatientCreateSerializer,
    PatientSerializer,
    PatientUpdateSerializer,
    plain,
)
from clinic_core.patients.models import Patient
from clinic_core.patients.selectors import get_patient_or_none, patients_visible_to
from clinic_core.patients.services import PatientService

NOT_FOUND = "Patient not found"


@extend_schema_view(
    list=extend_schema(
        tags=["Patients"],
        responses={200: PatientSerializer(many=True)},
        parameters=[
            OpenApiParameter("organization_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("unit_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("page_size", OpenApiTypes.INT, OpenApiParameter.QUERY, required=False),
        ],
    ),
    retrieve=extend_schema(tags=["Patients"], responses={200: PatientSerializer}),
    create=extend_schema(tags=["Patients"], request=PatientCreateSerializer, responses={201: PatientSerializer}),
    partial_update=extend_schema(tags=["Patients"], request=PatientUpdateSerializer, responses={200: PatientSerializer}),
    destroy=extend_schema(tags=["Patients"], responses={204: None}),
)
class PatientViewSet(viewsets.ViewSet):
    """
    Patient registry of a unit. Listing is paginated and searchable by name,
    phone, email or CPF.
    """
    permission_classes = [ActorRequired, resource_guard("patient")]

    serializer_class = PatientSerializer
    queryset = Patient.objects.none()

    def get_object(self, pk) -> Patient:
        patient = get_patient_or_none(patient_id=parse_pk(pk, NOT_FOUND))
        if patient is None:
            raise NotFound(NOT_FOUND)
        self.check_object_permissions(self.request, patient)
        return patient

    def list(self, request):
        actor = require_actor(request)
        qp = request.query_params
        qs = patients_visible_to(
            actor,
            organization_id=parse_optional_uuid(qp.get("organization_id"), "organization_id"),
            unit_id=parse_optional_uuid(qp.get("unit_id"), "unit_id"),
            q=qp.get("q"),
        )
        return paginate(request, qs, PatientSerializer)

    def retrieve(self, request, pk=None):
        return Response(PatientSerializer(self.get_object(pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = PatientCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = plain(ser.validated_data)

        unit = resolve_unit(data.pop("unit_id"))
        actor = require_permission(request, "patient", "create", organization_id=unit.organization_id, unit_id=unit.id)

        patient = PatientService.create(actor_user_id=actor.user_id, unit=unit, data=data)
        return Response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        patient = self.get_object(pk)
        actor = require_actor(request)

        ser = PatientUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        patient = PatientService.update(actor_user_id=actor.user_id, patient_id=patient.id, data=plain(ser.validated_data))
        return Response(PatientSerializer(patient).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        patient = self.get_object(pk)
        actor = require_actor(request)
        PatientService.delete(actor_user_id=actor.user_id, patient_id=patient.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
