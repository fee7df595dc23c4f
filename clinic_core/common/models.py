# clinic_core/common/models.py
from __future__ import annotations

import uuid

from django.db import models


class TimeStampedModel(models.Model):
    """
    Standard timestamps for all entities.
    """
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class UnitScopedModel(TimeStampedModel):
    """
    Clinical data owned by one unit (health post) of one organization.

    Scope is stored as plain UUID columns; services check that the unit belongs
    to the organization before writing.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    organization_id = models.UUIDField(db_index=True)
    unit_id = models.UUIDField(db_index=True)

    class Meta:
        abstract = True
