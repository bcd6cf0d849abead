import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Avg, Count

from apps.account.models import Doctor
from core.enum import ReviewStatus

logger = logging.getLogger(__name__)

ONE_DECIMAL = Decimal("0.1")


class RatingAggregator:
    """
    Keeps Doctor.rating and Doctor.total_reviews in line with the doctor's
    approved reviews. This is the only code path that writes those fields.
    """

    @staticmethod
    def round_rating(average) -> Decimal:
        return Decimal(str(average)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)

    @classmethod
    def recompute(cls, doctor_id: int) -> Doctor:
        from .models import Review

        stats = Review.objects.filter(
            doctor_id=doctor_id, status=ReviewStatus.APPROVED.value
        ).aggregate(average=Avg("rating"), total=Count("id"))

        if not stats["total"]:
            rating, total_reviews = Decimal("0"), 0
        else:
            rating, total_reviews = cls.round_rating(stats["average"]), stats["total"]

        Doctor.objects.filter(id=doctor_id).update(
            rating=rating, total_reviews=total_reviews
        )
        logger.info(
            f"Doctor {doctor_id} rating recomputed: {rating} from {total_reviews} reviews"
        )
        return Doctor.objects.get(id=doctor_id)
