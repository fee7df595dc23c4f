# clinic_core/patients/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from clinic_core.common.api.serializers import AddressSerializer
from clinic_core.patients.models import Patient


class EmergencyContactSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    phone = serializers.CharField(max_length=32)
    relationship = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")


class PatientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = [
            "id",
            "organization_id",
            "unit_id",
            "name",
            "email",
            "phone",
            "date_of_birth",
            "gender",
            "cpf",
            "address",
            "emergency_contact",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class _PatientFieldsMixin(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    date_of_birth = serializers.DateField(required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=Patient.Gender.choices, required=False, allow_blank=True)
    cpf = serializers.CharField(max_length=14, required=False, allow_blank=True)
    address = AddressSerializer(required=False)
    emergency_contact = EmergencyContactSerializer(required=False)


class PatientCreateSerializer(_PatientFieldsMixin):
    unit_id = serializers.UUIDField()
    name = serializers.CharField(max_length=255)


class PatientUpdateSerializer(_PatientFieldsMixin):
    name = serializers.CharField(max_length=255, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("At least one field is required.")
        return attrs


def plain(validated: dict) -> dict:
    """Nested serializer output (OrderedDict) flattened to JSON-ready dicts."""
    out = dict(validated)
    for key in ("address", "emergency_contact"):
        if key in out and out[key] is not None:
            out[key] = dict(out[key])
    return out
