# clinic_core/appointments/models.py
from django.db import models

from clinic_core.common.models import UnitScopedModel


class AppointmentStatus(models.TextChoices):
    SCHEDULED = "scheduled", "Scheduled"
    CONFIRMED = "confirmed", "Confirmed"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


# status -> statuses it may move to
STATUS_TRANSITIONS: dict[str, frozenset[str]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class Appointment(UnitScopedModel):
    """
    A slot with one doctor. `patient` is empty for anonymous bookings, which
    only carry patient_name / patient_phone.
    """
    doctor = models.ForeignKey(
        "doctors.Doctor",
        on_delete=models.PROTECT,
        related_name="appointments",
    )
    patient = models.ForeignKey(
        "patients.Patient",
        on_delete=models.SET_NULL,
        related_name="appointments",
        null=True,
        blank=True,
    )

    patient_name = models.CharField(max_length=255)
    patient_phone = models.CharField(max_length=32, blank=True, default="")

    date_time = models.DateTimeField(db_index=True)
    duration_minutes = models.PositiveIntegerField(default=30)

    status = models.CharField(
        max_length=16,
        choices=AppointmentStatus.choices,
        default=AppointmentStatus.SCHEDULED,
        db_index=True,
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "appointments_appointment"
        indexes = [
            models.Index(fields=["organization_id", "unit_id", "date_time"]),
            models.Index(fields=["doctor", "date_time"]),
        ]

    def __str__(self) -> str:
        return f"{self.patient_name} @ {self.date_time:%Y-%m-%d %H:%M}"
