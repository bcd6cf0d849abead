from django.conf import settings
from django.db import models

from apps.account.models import Doctor
from core.enum import AppointmentStatus, AppointmentType
from core.models import BaseModel


class Appointment(BaseModel):

    # Appointments are never deleted: a doctor with bookings cannot be removed,
    # and a deleted patient leaves the denormalised patient_* fields behind
    doctor = models.ForeignKey(
        Doctor, on_delete=models.PROTECT, related_name="appointments"
    )
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="appointments",
    )
    patient_name = models.CharField(max_length=255)
    patient_email = models.EmailField()
    patient_phone = models.CharField(max_length=20, blank=True)
    appointment_date = models.DateField()
    appointment_time = models.CharField(max_length=20)
    appointment_type = models.CharField(
        max_length=10, choices=AppointmentType.choices()
    )
    status = models.CharField(
        max_length=15,
        choices=AppointmentStatus.choices(),
        default=AppointmentStatus.PENDING.value,
    )
    symptoms = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    prescription = models.ForeignKey(
        "prescription.Prescription",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cancelled_appointments",
    )
    google_calendar_event_id = models.CharField(max_length=255, blank=True)
    apple_calendar_event_id = models.CharField(max_length=255, blank=True)

    class Meta:
        db_table = "appointments"
        ordering = ["-appointment_date", "-created_at"]

    def __str__(self):
        return f"{self.patient_name} - Dr. {self.doctor.user.name}"
