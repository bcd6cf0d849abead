from django.conf import settings
from django.db import models

from apps.appointment.models import Appointment
from core.models import BaseModel


class Prescription(BaseModel):
    appointment = models.ForeignKey(
        Appointment, on_delete=models.CASCADE, related_name="prescriptions"
    )
    # The prescribing doctor's account, not the Doctor profile
    doctor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="issued_prescriptions",
    )
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="prescriptions",
    )
    # [{"name", "dosage", "frequency", "duration"}, ...]
    medications = models.JSONField(default=list)
    instructions = models.TextField(blank=True)
    follow_up_date = models.DateField(null=True, blank=True)

    class Meta:
        db_table = "prescriptions"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Prescription #{self.id} for appointment {self.appointment_id}"
