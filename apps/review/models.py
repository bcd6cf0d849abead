from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from apps.account.models import Doctor
from apps.appointment.models import Appointment
from core.enum import ReviewStatus
from core.models import BaseModel


class Review(BaseModel):
    doctor = models.ForeignKey(Doctor, on_delete=models.CASCADE, related_name="reviews")
    # Kept when the patient account is deleted
    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
    )
    appointment = models.OneToOneField(
        Appointment, on_delete=models.CASCADE, related_name="review"
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(blank=True)
    # Reviews are published on create; admins may reject them afterwards
    status = models.CharField(
        max_length=10,
        choices=ReviewStatus.choices(),
        default=ReviewStatus.APPROVED.value,
    )

    class Meta:
        db_table = "reviews"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["doctor", "status"]),
            models.Index(fields=["patient"]),
        ]

    def __str__(self):
        return f"{self.rating}/5 for Dr. {self.doctor.user.name}"
