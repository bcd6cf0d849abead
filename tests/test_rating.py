from decimal import Decimal

import pytest

from apps.review.models import Review
from apps.review.rating import RatingAggregator

from .conftest import make_appointment, make_user


@pytest.mark.parametrize(
    "average,expected",
    [
        (5, "5.0"),
        (4.25, "4.3"),
        (4.24, "4.2"),
        (4.5, "4.5"),
        (3.3333333, "3.3"),
        (4.05, "4.1"),
    ],
)
def test_round_rating_half_up(average, expected):
    assert RatingAggregator.round_rating(average) == Decimal(expected)


@pytest.mark.django_db
class TestRecompute:
    def _review(self, doctor, rating, status="approved"):
        patient = make_user(f"p{Review.objects.count()}@example.com")
        appointment = make_appointment(patient, doctor, status="completed")
        return Review.objects.create(
            doctor=doctor,
            patient=patient,
            appointment=appointment,
            rating=rating,
            status=status,
        )

    def test_no_reviews_resets_to_zero(self, doctor):
        doctor.rating = Decimal("4.0")
        doctor.total_reviews = 3
        doctor.save()

        doctor = RatingAggregator.recompute(doctor.id)

        assert doctor.rating == Decimal("0")
        assert doctor.total_reviews == 0

    def test_only_approved_reviews_count(self, doctor):
        self._review(doctor, 5)
        self._review(doctor, 4)
        self._review(doctor, 1, status="rejected")
        self._review(doctor, 1, status="pending")

        doctor = RatingAggregator.recompute(doctor.id)

        assert doctor.rating == Decimal("4.5")
        assert doctor.total_reviews == 2

    def test_rounds_average(self, doctor):
        for rating in (5, 4, 4):
            self._review(doctor, rating)

        doctor = RatingAggregator.recompute(doctor.id)

        assert doctor.rating == Decimal("4.3")
        assert doctor.total_reviews == 3
