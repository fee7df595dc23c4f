# clinic_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.iam.models import Account, Profile
from clinic_core.iam.roles import SystemRole
from clinic_core.iam.statements import PermissionScope, permission_entry_errors


class PermissionEntryInputSerializer(serializers.Serializer):
    resource = serializers.CharField(max_length=64)
    actions = serializers.ListField(child=serializers.CharField(max_length=32), allow_empty=False)
    scope = serializers.ChoiceField(choices=PermissionScope.choices, required=False)

    def validate(self, attrs):
        errors = permission_entry_errors(attrs)
        if errors:
            raise serializers.ValidationError(errors)
        # keep stored order but drop duplicates
        attrs["actions"] = list(dict.fromkeys(attrs["actions"]))
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    organization_id = serializers.UUIDField(read_only=True)
    unit_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Profile
        fields = [
            "id",
            "name",
            "description",
            "system_role",
            "organization_id",
            "unit_id",
            "permissions",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ProfileCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128)
    description = serializers.CharField()
    organization_id = serializers.UUIDField()
    unit_id = serializers.UUIDField(required=False, allow_null=True)
    permissions = PermissionEntryInputSerializer(many=True, required=False, default=list)


class ProfileUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=128, required=False)
    description = serializers.CharField(required=False)
    unit_id = serializers.UUIDField(required=False, allow_null=True)
    permissions = PermissionEntryInputSerializer(many=True, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AccountSerializer(serializers.ModelSerializer):
    email = serializers.CharField(read_only=True)
    organization_id = serializers.UUIDField(read_only=True, allow_null=True)
    organization_name = serializers.CharField(source="organization.name", read_only=True, default=None)
    unit_id = serializers.UUIDField(read_only=True, allow_null=True)
    profile_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = Account
        fields = [
            "id",
            "email",
            "full_name",
            "system_role",
            "organization_id",
            "organization_name",
            "unit_id",
            "profile_id",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    system_role = serializers.ChoiceField(choices=SystemRole.choices, default=SystemRole.USER)
    organization_id = serializers.UUIDField(required=False, allow_null=True)
    unit_id = serializers.UUIDField(required=False, allow_null=True)
    profile_id = serializers.UUIDField(required=False, allow_null=True)


class AccountUpdateSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=255, required=False)
    email = serializers.EmailField(required=False)
    password = serializers.CharField(min_length=8, write_only=True, required=False)
    system_role = serializers.ChoiceField(choices=SystemRole.choices, required=False)
    organization_id = serializers.UUIDField(required=False)
    unit_id = serializers.UUIDField(required=False, allow_null=True)
    profile_id = serializers.UUIDField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


class AssignRoleSerializer(serializers.Serializer):
    system_role = serializers.ChoiceField(choices=SystemRole.choices)
    profile_id = serializers.UUIDField(required=False, allow_null=True)
