from rest_framework import status
from rest_framework.decorators import api_view, permission_classes

from apps.account.utils import serialize_doctor
from core.permissions import IsPatient
from core.responses import standardize_response

from .services import FavoriteServices


@api_view(["GET", "POST"])
@permission_classes([IsPatient])
def favorites(request):
    """
    GET  /api/favorites
    POST /api/favorites  {"doctor_id": 1}
    """
    if request.method == "POST":
        favorite = FavoriteServices.add_favorite(request.user, request.data.get("doctor_id"))
        return standardize_response(
            True,
            "Added to favorites",
            {"favorite": {"id": favorite.id, "doctor_id": favorite.doctor_id}},
            status_code=status.HTTP_201_CREATED,
        )

    data = [
        {
            "id": favorite.id,
            "doctor": serialize_doctor(favorite.doctor),
            "created_at": favorite.created_at,
        }
        for favorite in FavoriteServices.get_favorites(request.user)
    ]
    return standardize_response(
        True, "Favorites retrieved successfully", {"favorites": data, "count": len(data)}
    )


@api_view(["DELETE"])
@permission_classes([IsPatient])
def remove_favorite(request, doctor_id):
    FavoriteServices.remove_favorite(request.user, doctor_id)
    return standardize_response(True, "Removed from favorites")


@api_view(["GET"])
@permission_classes([IsPatient])
def check_favorite(request, doctor_id):
    return standardize_response(
        True,
        "Favorite status retrieved",
        {"is_favorite": FavoriteServices.is_favorite(request.user, doctor_id)},
    )
