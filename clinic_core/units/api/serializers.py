# clinic_core/units/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.common.api.serializers import AddressSerializer
from clinic_core.units.models import Unit


class UnitSerializer(serializers.ModelSerializer):
    organization_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Unit
        fields = [
            "id",
            "organization_id",
            "name",
            "phone",
            "email",
            "manager",
            "specialties",
            "address",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class UnitCreateSerializer(serializers.Serializer):
    organization_id = serializers.UUIDField()
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True, default="")
    manager = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    specialties = serializers.ListField(child=serializers.CharField(max_length=128), required=False, default=list)
    address = AddressSerializer()


class UnitUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    phone = serializers.CharField(max_length=32, required=False)
    email = serializers.EmailField(required=False, allow_blank=True)
    manager = serializers.CharField(max_length=255, required=False, allow_blank=True)
    specialties = serializers.ListField(child=serializers.CharField(max_length=128), required=False)
    address = AddressSerializer(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs
