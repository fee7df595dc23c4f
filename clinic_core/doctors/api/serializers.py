# clinic_core/doctors/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.doctors.models import Doctor


class WorkScheduleEntrySerializer(serializers.Serializer):
    day_of_week = serializers.IntegerField(min_value=0, max_value=6)
    start_time = serializers.TimeField(format="%H:%M")
    end_time = serializers.TimeField(format="%H:%M")
    is_active = serializers.BooleanField(default=True)

    def validate(self, attrs):
        if attrs["start_time"] >= attrs["end_time"]:
            raise serializers.ValidationError({"end_time": "end_time must be after start_time."})
        # stored as JSON
        attrs["start_time"] = attrs["start_time"].strftime("%H:%M")
        attrs["end_time"] = attrs["end_time"].strftime("%H:%M")
        return attrs


class DoctorSerializer(serializers.ModelSerializer):
    account_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Doctor
        fields = [
            "id",
            "organization_id",
            "unit_id",
            "account_id",
            "name",
            "email",
            "phone",
            "crm",
            "specialties",
            "work_schedule",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class DoctorCreateSerializer(serializers.Serializer):
    unit_id = serializers.UUIDField()
    account_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255)
    crm = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    specialties = serializers.ListField(child=serializers.CharField(max_length=128), required=False, default=list)
    work_schedule = WorkScheduleEntrySerializer(many=True, required=False, default=list)


class DoctorUpdateSerializer(serializers.Serializer):
    account_id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(max_length=255, required=False)
    crm = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    specialties = serializers.ListField(child=serializers.CharField(max_length=128), required=False)
    work_schedule = WorkScheduleEntrySerializer(many=True, required=False)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs
