import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated

from core.permissions import IsAdmin, IsPatient
from core.responses import standardize_response

from .services import ReviewServices

logger = logging.getLogger(__name__)

review_services = ReviewServices()


def serialize_review(review) -> dict:
    return {
        "id": review.id,
        "doctor_id": review.doctor_id,
        "patient_id": review.patient_id,
        "appointment_id": review.appointment_id,
        "rating": review.rating,
        "comment": review.comment,
        "status": review.status,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    }


@api_view(["POST"])
@permission_classes([IsPatient])
def create_review(request):
    """
    Create a review
    POST /api/reviews

    Expected payload:
    {
        "appointment_id": 12,
        "rating": 5,
        "comment": "Very thorough"
    }
    """
    review = review_services.create_review(request.user, request.data)
    return standardize_response(
        True,
        "Review submitted successfully",
        {"review": serialize_review(review)},
        status_code=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([AllowAny])
def doctor_reviews(request, doctor_id):
    """
    Approved reviews of a doctor, newest first
    GET /api/reviews/doctor/{doctor_id}
    """
    reviews = []
    for review in review_services.get_doctor_reviews(doctor_id):
        data = serialize_review(review)
        patient = review.patient
        data["patient"] = {
            "name": patient.name if patient else "Former patient",
            "profile_picture": patient.profile_picture if patient else "",
        }
        reviews.append(data)

    return standardize_response(
        True,
        "Reviews retrieved successfully",
        {"reviews": reviews, "count": len(reviews)},
    )


@api_view(["PUT", "DELETE"])
@permission_classes([IsAuthenticated])
def review_detail(request, review_id):
    if request.method == "DELETE":
        review_services.delete_review(request.user, review_id)
        return standardize_response(True, "Review deleted successfully")

    review = review_services.update_review(request.user, review_id, request.data)
    return standardize_response(
        True, "Review updated successfully", {"review": serialize_review(review)}
    )


@api_view(["PUT"])
@permission_classes([IsAdmin])
def moderate_review(request, review_id):
    """
    PUT /api/reviews/{id}/moderate  {"status": "approved" | "rejected"}
    """
    review = review_services.moderate_review(
        request.user, review_id, request.data.get("status")
    )
    return standardize_response(
        True, "Review moderated successfully", {"review": serialize_review(review)}
    )
