import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction

from apps.account.models import User
from apps.appointment import lifecycle
from apps.appointment.models import Appointment
from apps.notification.dispatcher import NotificationDispatcher
from core.enum import ReviewStatus
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.policies import AccessPolicy
from core.validators import clean_text

from .models import Review
from .rating import RatingAggregator

logger = logging.getLogger(__name__)


def _clean_rating(value) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Rating must be between 1 and 5")
    if not number.is_integer() or not 1 <= number <= 5:
        raise ValidationError("Rating must be between 1 and 5")
    return int(number)


class ReviewServices:
    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or NotificationDispatcher()

    @staticmethod
    def _get_locked(review_id: int) -> Review:
        review = Review.objects.select_for_update().filter(id=review_id).first()
        if not review:
            raise NotFoundError("Review not found")
        return review

    def create_review(self, user: User, review_data: Dict[str, Any]) -> Review:
        """
        Create a review for a completed appointment owned by the patient.
        The reviewed doctor is always the appointment's doctor.
        """
        appointment_id = review_data.get("appointment_id")
        if not appointment_id or review_data.get("rating") in (None, ""):
            raise ValidationError("Appointment ID and rating are required")

        rating = _clean_rating(review_data["rating"])

        with transaction.atomic():
            appointment = (
                Appointment.objects.select_for_update(of=("self",))
                .select_related("doctor__user")
                .filter(id=appointment_id)
                .first()
            )
            if not appointment:
                raise NotFoundError("Appointment not found")

            AccessPolicy.ensure_can_review(user, appointment)

            doctor_id = review_data.get("doctor_id")
            if doctor_id and str(doctor_id) != str(appointment.doctor_id):
                raise ValidationError("Doctor does not match the appointment")

            if appointment.status != lifecycle.COMPLETED:
                raise ValidationError("You can only review completed appointments")

            if Review.objects.filter(appointment_id=appointment.id).exists():
                raise ConflictError("Review already exists for this appointment")

            try:
                with transaction.atomic():
                    review = Review.objects.create(
                        doctor_id=appointment.doctor_id,
                        patient=user,
                        appointment=appointment,
                        rating=rating,
                        comment=clean_text(review_data.get("comment"), "Comment"),
                        status=ReviewStatus.APPROVED.value,
                    )
            except IntegrityError:
                raise ConflictError("Review already exists for this appointment")

            RatingAggregator.recompute(appointment.doctor_id)
            review.doctor = appointment.doctor
            self.dispatcher.review_received(review, user.name)

        logger.info(
            f"Review created: ID {review.id}, Doctor {review.doctor_id}, Rating {rating}"
        )
        return review

    def update_review(self, user: User, review_id: int, update_data: Dict[str, Any]) -> Review:
        with transaction.atomic():
            review = self._get_locked(review_id)
            AccessPolicy.ensure_review_author(user, review, "update")

            if update_data.get("rating") is not None:
                review.rating = _clean_rating(update_data["rating"])
            if "comment" in update_data:
                review.comment = clean_text(update_data.get("comment"), "Comment")
            review.save(update_fields=["rating", "comment", "updated_at"])

            RatingAggregator.recompute(review.doctor_id)

        logger.info(f"Review updated: ID {review.id}")
        return review

    def delete_review(self, user: User, review_id: int) -> None:
        with transaction.atomic():
            review = self._get_locked(review_id)
            AccessPolicy.ensure_review_author(user, review, "delete")

            doctor_id = review.doctor_id
            review.delete()
            RatingAggregator.recompute(doctor_id)

        logger.info(f"Review deleted: ID {review_id}, Doctor {doctor_id}")

    def moderate_review(self, user: User, review_id: int, new_status: str) -> Review:
        """
        Admin moderation. The rating is recomputed on every outcome, so a
        rejected review stops counting straight away.
        """
        if not AccessPolicy.is_admin(user):
            raise AuthorizationError("Access denied. Admin only.")
        if new_status not in (ReviewStatus.APPROVED.value, ReviewStatus.REJECTED.value):
            raise ValidationError("Invalid status. Must be approved or rejected")

        with transaction.atomic():
            review = self._get_locked(review_id)
            review.status = new_status
            review.save(update_fields=["status", "updated_at"])
            RatingAggregator.recompute(review.doctor_id)

        logger.info(f"Review moderated: ID {review.id}, status {new_status}")
        return review

    @staticmethod
    def get_doctor_reviews(doctor_id: int):
        return (
            Review.objects.filter(doctor_id=doctor_id, status=ReviewStatus.APPROVED.value)
            .select_related("patient")
            .order_by("-created_at")
        )
