# clinic_core/units/models.py
from __future__ import annotations

import uuid

from django.db import models

from clinic_core.organizations.models import Organization


class Unit(models.Model):
    """
    A health post (physical clinic location) under an Organization.
    Clinical data (doctors, patients, appointments) is owned by a unit.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name="units")

    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    manager = models.CharField(max_length=255, blank=True, default="")
    specialties = models.JSONField(default=list, blank=True)

    # {street, number, complement, neighborhood, city, state, zip_code}
    address = models.JSONField(default=dict)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "units_unit"
        indexes = [
            models.Index(fields=["organization"], name="unit_organization_id_idx"),
            models.Index(fields=["organization", "name"]),
        ]

    def __str__(self) -> str:
        return self.name
