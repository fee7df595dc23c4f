# clinic_core/iam/api/schema_serializers.py
from __future__ import annotations

from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    # accounts log in with their email (stored as the auth username)
    email = serializers.EmailField(required=False)
    username = serializers.CharField(required=False)
    password = serializers.CharField()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class PermissionEntrySerializer(serializers.Serializer):
    resource = serializers.CharField()
    actions = serializers.ListField(child=serializers.CharField())
    scope = serializers.CharField(required=False)


class ActorSerializer(serializers.Serializer):
    id = serializers.CharField()
    email = serializers.CharField(allow_blank=True)
    name = serializers.CharField(allow_blank=True)
    system_role = serializers.CharField()
    organization_id = serializers.UUIDField(allow_null=True)
    unit_id = serializers.UUIDField(allow_null=True)
    profile_id = serializers.UUIDField(allow_null=True)


class MeResponseSerializer(serializers.Serializer):
    user = ActorSerializer()
    permissions = PermissionEntrySerializer(many=True)
    role_summary = serializers.ListField(child=serializers.CharField())
    accessible_routes = serializers.ListField(child=serializers.CharField())
    server_time = serializers.DateTimeField()
    api_version = serializers.CharField()


class RoleDescriptionSerializer(serializers.Serializer):
    role = serializers.CharField()
    label = serializers.CharField()
    level = serializers.IntegerField()
    statements = serializers.DictField(child=serializers.ListField(child=serializers.CharField()))
    summary = serializers.ListField(child=serializers.CharField())


class NavigationItemSerializer(serializers.Serializer):
    label = serializers.CharField()
    route = serializers.CharField()
    href = serializers.CharField(allow_null=True)
    resource = serializers.CharField()
    action = serializers.CharField()
