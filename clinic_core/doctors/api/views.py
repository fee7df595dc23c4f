# clinic_core/doctors/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from clinic_core.common.api.params import parse_optional_uuid, parse_pk
from clinic_core.common.scoping import resolve_unit
from clinic_core.doctors.api.serializers import DoctorCreateSerializer, DoctorSerializer, DoctorUpdateSerializer
from clinic_core.doctors.models import Doctor
from clinic_core.doctors.selectors import doctors_visible_to, get_doctor_or_none
from clinic_core.doctors.services import DoctorService
from clinic_core.iam.guards import ActorRequired, require_actor, require_permission, resource_guard

NOT_FOUND = "Doctor not found"


@extend_schema_view(
    list=extend_schema(
        tags=["Doctors"],
        responses={200: DoctorSerializer(many=True)},
        parameters=[
            OpenApiParameter("organization_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("unit_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("q", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("active", OpenApiTypes.BOOL, OpenApiParameter.QUERY, required=False),
        ],
    ),
    retrieve=extend_schema(tags=["Doctors"], responses={200: DoctorSerializer}),
    create=extend_schema(tags=["Doctors"], request=DoctorCreateSerializer, responses={201: DoctorSerializer}),
    partial_update=extend_schema(tags=["Doctors"], request=DoctorUpdateSerializer, responses={200: DoctorSerializer}),
    destroy=extend_schema(tags=["Doctors"], responses={204: None}),
)
class DoctorViewSet(viewsets.ViewSet):
    permission_classes = [ActorRequired, resource_guard("doctor")]

    serializer_class = DoctorSerializer
    queryset = Doctor.objects.none()

    def get_object(self, pk) -> Doctor:
        doctor = get_doctor_or_none(doctor_id=parse_pk(pk, NOT_FOUND))
        if doctor is None:
            raise NotFound(NOT_FOUND)
        self.check_object_permissions(self.request, doctor)
        return doctor

    def list(self, request):
        actor = require_actor(request)
        qp = request.query_params
        qs = doctors_visible_to(
            actor,
            organization_id=parse_optional_uuid(qp.get("organization_id"), "organization_id"),
            unit_id=parse_optional_uuid(qp.get("unit_id"), "unit_id"),
            q=qp.get("q"),
            active_only=(qp.get("active") or "").lower() in ("1", "true", "yes"),
        )
        return Response(DoctorSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        return Response(DoctorSerializer(self.get_object(pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = DoctorCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        unit = resolve_unit(d["unit_id"])
        actor = require_permission(request, "doctor", "create", organization_id=unit.organization_id, unit_id=unit.id)

        doctor = DoctorService.create(
            actor_user_id=actor.user_id,
            unit=unit,
            name=d["name"],
            crm=d["crm"],
            email=d.get("email") or "",
            phone=d.get("phone") or "",
            specialties=d.get("specialties") or [],
            work_schedule=[dict(e) for e in d.get("work_schedule") or []],
            account_id=d.get("account_id"),
        )
        return Response(DoctorSerializer(doctor).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        doctor = self.get_object(pk)
        actor = require_actor(request)

        ser = DoctorUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = dict(ser.validated_data)
        if "work_schedule" in data:
            data["work_schedule"] = [dict(e) for e in data["work_schedule"]]

        doctor = DoctorService.update(actor_user_id=actor.user_id, doctor_id=doctor.id, data=data)
        return Response(DoctorSerializer(doctor).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        doctor = self.get_object(pk)
        actor = require_actor(request)
        DoctorService.delete(actor_user_id=actor.user_id, doctor_id=doctor.id)
        return Response(status=status.HTTP_204_NO_CONTENT)
