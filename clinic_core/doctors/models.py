# clinic_core/doctors/models.py
from django.db import models
from django.db.models import Q

from clinic_core.common.models import UnitScopedModel


class Doctor(UnitScopedModel):
    """
    A practitioner attending at one unit.

    work_schedule: list of {"day_of_week": 0-6 (Monday=0), "start_time": "HH:MM",
    "end_time": "HH:MM", "is_active": bool}.
    """
    account = models.ForeignKey(
        "iam.Account",
        on_delete=models.SET_NULL,
        related_name="doctor_records",
        null=True,
        blank=True,
    )

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")

    # medical licence number (CRM)
    crm = models.CharField(max_length=32)
    specialties = models.JSONField(default=list, blank=True)
    work_schedule = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "doctors_doctor"
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "crm"],
                condition=~Q(crm=""),
                name="uq_doctor_organization_crm",
            ),
        ]
        indexes = [
            models.Index(fields=["organization_id", "unit_id", "name"]),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.crm})"
