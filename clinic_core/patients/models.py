# clinic_core/patients/models.py
from django.db import models
from django.db.models import Q

from clinic_core.common.models import UnitScopedModel


class Patient(UnitScopedModel):
    class Gender(models.TextChoices):
        MALE = "male", "Male"
        FEMALE = "female", "Female"
        OTHER = "other", "Other"
        PREFER_NOT_TO_SAY = "prefer-not-to-say", "Prefer not to say"

    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=32, choices=Gender.choices, blank=True, default="")

    # stored as typed (digits or formatted)
    cpf = models.CharField(max_length=14, blank=True, default="")

    address = models.JSONField(default=dict, blank=True)
    # {"name", "phone", "relationship"}
    emergency_contact = models.JSONField(default=dict, blank=True)

    class Meta:
        db_table = "patients_patient"
        constraints = [
            models.UniqueConstraint(
                fields=["organization_id", "cpf"],
                condition=~Q(cpf=""),
                name="uq_patient_organization_cpf",
            ),
        ]
        indexes = [
            models.Index(fields=["organization_id", "unit_id", "name"]),
        ]

    def __str__(self) -> str:
        return self.name
