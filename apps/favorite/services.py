import logging

from django.db import IntegrityError, transaction

from apps.account.models import Doctor, User
from core.exceptions import ConflictError, NotFoundError, ValidationError

from .models import Favorite

logger = logging.getLogger(__name__)


class FavoriteServices:
    """A patient's shortlist of doctors"""

    @staticmethod
    def add_favorite(user: User, doctor_id) -> Favorite:
        if not doctor_id:
            raise ValidationError("Doctor ID is required")

        doctor = Doctor.objects.filter(id=doctor_id).first()
        if not doctor:
            raise NotFoundError("Doctor not found")

        if Favorite.objects.filter(user=user, doctor=doctor).exists():
            raise ConflictError("Doctor is already in favorites")

        try:
            with transaction.atomic():
                favorite = Favorite.objects.create(user=user, doctor=doctor)
        except IntegrityError:
            raise ConflictError("Doctor is already in favorites")

        logger.info(f"Favorite added: user {user.id}, doctor {doctor.id}")
        return favorite

    @staticmethod
    def remove_favorite(user: User, doctor_id: int) -> None:
        deleted, _ = Favorite.objects.filter(user=user, doctor_id=doctor_id).delete()
        if not deleted:
            raise NotFoundError("Favorite not found")
        logger.info(f"Favorite removed: user {user.id}, doctor {doctor_id}")

    @staticmethod
    def get_favorites(user: User):
        return Favorite.objects.filter(user=user).select_related("doctor__user")

    @staticmethod
    def is_favorite(user: User, doctor_id: int) -> bool:
        return Favorite.objects.filter(user=user, doctor_id=doctor_id).exists()
