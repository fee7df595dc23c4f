# clinic_core/common/api/serializers.py
from __future__ import annotations

from rest_framework import serializers


class AddressSerializer(serializers.Serializer):
    """
    Postal address stored as JSON on organizations and units.
    CEP lookup / formatting is a frontend concern; values are stored as typed.
    """
    street = serializers.CharField(max_length=255)
    number = serializers.CharField(max_length=32)
    complement = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    neighborhood = serializers.CharField(max_length=128)
    city = serializers.CharField(max_length=128)
    state = serializers.CharField(max_length=64)
    zip_code = serializers.CharField(max_length=16)
