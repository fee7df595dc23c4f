# clinic_core/appointments/api/views.py
from __future__ import annotations

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic_core.appointments.api.serializers import (
    AppointmentCreateSerializer,
    AppointmentSerializer,
    AppointmentStatusSerializer,
    AppointmentUpdateSerializer,
    PublicBookingSerializer,
)
from clinic_core.appointments.models import Appointment
from clinic_core.appointments.selectors import appointment_qs, appointments_visible_to, get_appointment_or_none
from clinic_core.appointments.services import AppointmentService, AppointmentUpdate
from clinic_core.common.api.params import parse_optional_uuid, parse_pk
from clinic_core.common.scoping import resolve_unit
from clinic_core.iam.guards import ActorRequired, require_actor, require_permission, resource_guard

NOT_FOUND = "Appointment not found"


def public_booking_enabled() -> bool:
    cfg = getattr(settings, "CLINIC_ADMIN", {}) or {}
    return bool(cfg.get("PUBLIC_BOOKING_ENABLED", True))


def _reload(appt: Appointment) -> Appointment:
    return appointment_qs().get(id=appt.id)


@extend_schema_view(
    list=extend_schema(
        tags=["Appointments"],
        responses={200: AppointmentSerializer(many=True)},
        parameters=[
            OpenApiParameter("organization_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("unit_id", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("status", OpenApiTypes.STR, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("doctor", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("patient", OpenApiTypes.UUID, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_from", OpenApiTypes.DATETIME, OpenApiParameter.QUERY, required=False),
            OpenApiParameter("date_to", OpenApiTypes.DATETIME, OpenApiParameter.QUERY, required=False),
        ],
    ),
    retrieve=extend_schema(tags=["Appointments"], responses={200: AppointmentSerializer}),
    create=extend_schema(
        tags=["Appointments"], request=AppointmentCreateSerializer, responses={201: AppointmentSerializer}
    ),
    partial_update=extend_schema(
        tags=["Appointments"], request=AppointmentUpdateSerializer, responses={200: AppointmentSerializer}
    ),
    destroy=extend_schema(tags=["Appointments"], responses={204: None}),
    set_status=extend_schema(
        tags=["Appointments"], request=AppointmentStatusSerializer, responses={200: AppointmentSerializer}
    ),
    public=extend_schema(
        tags=["Appointments"], request=PublicBookingSerializer, responses={201: AppointmentSerializer}, auth=[]
    ),
)
class AppointmentViewSet(viewsets.ViewSet):
    """
    Unit appointments. `public/` is the anonymous booking endpoint; it is
    switched off with CLINIC_ADMIN["PUBLIC_BOOKING_ENABLED"].
    """
    permission_classes = [ActorRequired, resource_guard("appointment", action_map={"set_status": "update"})]

    serializer_class = AppointmentSerializer
    queryset = Appointment.objects.none()

    def get_object(self, pk) -> Appointment:
        appt = get_appointment_or_none(appointment_id=parse_pk(pk, NOT_FOUND))
        if appt is None:
            raise NotFound(NOT_FOUND)
        self.check_object_permissions(self.request, appt)
        return appt

    def list(self, request):
        actor = require_actor(request)
        qp = request.query_params
        qs = appointments_visible_to(
            actor,
            params=qp,
            organization_id=parse_optional_uuid(qp.get("organization_id"), "organization_id"),
            unit_id=parse_optional_uuid(qp.get("unit_id"), "unit_id"),
        )
        return Response(AppointmentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    def retrieve(self, request, pk=None):
        return Response(AppointmentSerializer(self.get_object(pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = AppointmentCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        unit = resolve_unit(d["unit_id"])
        actor = require_permission(
            request, "appointment", "create", organization_id=unit.organization_id, unit_id=unit.id
        )

        appt = AppointmentService.create(
            actor_user_id=actor.user_id,
            unit=unit,
            doctor_id=d["doctor_id"],
            date_time=d["date_time"],
            patient_id=d.get("patient_id"),
            patient_name=d.get("patient_name") or "",
            patient_phone=d.get("patient_phone") or "",
            duration_minutes=d["duration_minutes"],
            notes=d.get("notes") or "",
        )
        return Response(AppointmentSerializer(_reload(appt)).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        appt = self.get_object(pk)
        actor = require_actor(request)

        ser = AppointmentUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        appt = AppointmentService.update(
            actor_user_id=actor.user_id,
            appointment_id=appt.id,
            patch=AppointmentUpdate(
                doctor_id=d.get("doctor_id"),
                patient_id=d.get("patient_id"),
                clear_patient="patient_id" in d and d["patient_id"] is None,
                patient_name=d.get("patient_name"),
                patient_phone=d.get("patient_phone"),
                date_time=d.get("date_time"),
                duration_minutes=d.get("duration_minutes"),
                notes=d.get("notes"),
            ),
        )
        return Response(AppointmentSerializer(_reload(appt)).data, status=status.HTTP_200_OK)

    def destroy(self, request, pk=None):
        appt = self.get_object(pk)
        actor = require_actor(request)
        AppointmentService.delete(actor_user_id=actor.user_id, appointment_id=appt.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"], url_path="set-status")
    def set_status(self, request, pk=None):
        appt = self.get_object(pk)
        actor = require_actor(request)

        ser = AppointmentStatusSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        appt = AppointmentService.set_status(
            actor_user_id=actor.user_id,
            appointment_id=appt.id,
            status=ser.validated_data["status"],
        )
        return Response(AppointmentSerializer(_reload(appt)).data, status=status.HTTP_200_OK)

    @action(
        detail=False,
        methods=["post"],
        url_path="public",
        permission_classes=[AllowAny],
        authentication_classes=[],
    )
    def public(self, request):
        if not public_booking_enabled():
            raise NotFound()

        ser = PublicBookingSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        d = ser.validated_data

        appt = AppointmentService.create_anonymous(
            unit=resolve_unit(d["unit_id"]),
            doctor_id=d["doctor_id"],
            date_time=d["date_time"],
            patient_name=d["patient_name"],
            patient_phone=d["patient_phone"],
            notes=d.get("notes") or "",
        )
        return Response(AppointmentSerializer(_reload(appt)).data, status=status.HTTP_201_CREATED)
