# clinic_core/appointments/api/serializers.py
from __future__ import annotations

from django.utils import timezone
from rest_framework import serializers

from clinic_core.appointments.models import Appointment, AppointmentStatus


class AppointmentSerializer(serializers.ModelSerializer):
    doctor_id = serializers.UUIDField(read_only=True)
    doctor_name = serializers.CharField(source="doctor.name", read_only=True)
    patient_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Appointment
        fields = [
            "id",
            "organization_id",
            "unit_id",
            "doctor_id",
            "doctor_name",
            "patient_id",
            "patient_name",
            "patient_phone",
            "date_time",
            "duration_minutes",
            "status",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AppointmentCreateSerializer(serializers.Serializer):
    unit_id = serializers.UUIDField()
    doctor_id = serializers.UUIDField()
    patient_id = serializers.UUIDField(required=False, allow_null=True)
    patient_name = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    patient_phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    date_time = serializers.DateTimeField()
    duration_minutes = serializers.IntegerField(min_value=5, max_value=480, default=30)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if not attrs.get("patient_id") and not attrs.get("patient_name"):
            raise serializers.ValidationError({"patient_name": "Provide patient_id or patient_name."})
        return attrs


class AppointmentUpdateSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField(required=False)
    patient_id = serializers.UUIDField(required=False, allow_null=True)
    patient_name = serializers.CharField(max_length=255, required=False)
    patient_phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    date_time = serializers.DateTimeField(required=False)
    duration_minutes = serializers.IntegerField(min_value=5, max_value=480, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AppointmentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=AppointmentStatus.choices)


class PublicBookingSerializer(serializers.Serializer):
    unit_id = serializers.UUIDField()
    doctor_id = serializers.UUIDField()
    patient_name = serializers.CharField(max_length=255)
    patient_phone = serializers.CharField(max_length=32)
    date_time = serializers.DateTimeField()
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_date_time(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Appointments must be booked in the future.")
        return value
