# clinic_core/organizations/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.common.api.serializers import AddressSerializer
from clinic_core.organizations.models import Organization


class OrganizationSerializer(serializers.ModelSerializer):
    parent_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Organization
        fields = [
            "id",
            "name",
            "slug",
            "email",
            "phone",
            "cnpj",
            "logo",
            "address",
            "parent_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrganizationCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=32)
    cnpj = serializers.CharField(max_length=32)
    address = AddressSerializer()
    slug = serializers.SlugField(max_length=64, required=False, allow_null=True)
    logo = serializers.URLField(required=False, allow_blank=True, default="")
    parent_id = serializers.UUIDField(required=False, allow_null=True)


class OrganizationUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    email = serializers.EmailField(required=False)
    phone = serializers.CharField(max_length=32, required=False)
    cnpj = serializers.CharField(max_length=32, required=False)
    address = AddressSerializer(required=False)
    slug = serializers.SlugField(max_length=64, required=False)
    logo = serializers.URLField(required=False, allow_blank=True)
    parent_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class SetActiveOrganizationSerializer(serializers.Serializer):
    organization_id = serializers.UUIDField()
