from django.conf import settings
from django.db import models

from apps.account.models import Doctor
from core.models import BaseModel


class Favorite(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="favorites"
    )
    doctor = models.ForeignKey(
        Doctor, on_delete=models.CASCADE, related_name="favorited_by"
    )

    class Meta:
        db_table = "favorites"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "doctor"], name="unique_favorite_doctor")
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.doctor_id}"
