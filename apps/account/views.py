import logging

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAuthenticated

from core.enum import UserType
from core.exceptions import NotFoundError, ValidationError
from core.permissions import IsAdmin, IsAdminOrReadOnly
from core.responses import standardize_response

from .selectors import DoctorSelector, RegistrationRequestSelector, UserSelector
from .services import AuthServices, DoctorServices, UserServices
from .utils import serialize_doctor, serialize_registration_request, serialize_user

logger = logging.getLogger(__name__)

auth_services = AuthServices()

REFRESH_COOKIE = "refresh_token"


def _refresh_token_from(request):
    return request.COOKIES.get(REFRESH_COOKIE) or request.data.get("refresh_token")


# Authentication


@api_view(["POST"])
@permission_classes([AllowAny])
def register_user(request):
    """
    User registration endpoint
    POST /api/auth/register

    Expected payload:
    {
        "name": "John Doe",
        "email": "user@example.com",
        "password": "StrongPass123!",
        "role": "patient",
        // For doctors only:
        "specialization": "Cardiology",
        "qualification": "MBBS, MD",
        "experience": 5,
        "bio": "..."
    }
    """
    user = AuthServices.register_user(request.data)

    if user.role == UserType.DOCTOR.value:
        message = "Registration request submitted. You will receive an email once approved."
    else:
        message = "Registration successful"

    return standardize_response(
        True,
        message,
        {"user": serialize_user(user)},
        status_code=status.HTTP_201_CREATED,
    )


@api_view(["POST"])
@permission_classes([AllowAny])
def login_user(request):
    """
    User login endpoint
    POST /api/auth/login

    Expected payload:
    {
        "email": "user@example.com",
        "password": "password123"
    }
    """
    result = AuthServices.authenticate_user(
        request.data.get("email", ""), request.data.get("password", "")
    )

    response = standardize_response(
        True,
        "Login successful",
        {
            "access_token": result["access_token"],
            "refresh_token": result["refresh_token"],
            "user": serialize_user(result["user"]),
        },
    )
    response.set_cookie(
        REFRESH_COOKIE,
        result["refresh_token"],
        expires=result["refresh_token_expiry"],
        httponly=True,
        secure=not settings.DEBUG,
        samesite="Strict",
    )
    return response


@api_view(["POST"])
@permission_classes([AllowAny])
def refresh_token(request):
    """
    Issue a new access token from the refresh token cookie or body
    POST /api/auth/refresh
    """
    result = AuthServices.refresh_access_token(_refresh_token_from(request))
    return standardize_response(
        True,
        "Token refreshed successfully",
        {
            "access_token": result["access_token"],
            "user": serialize_user(result["user"]),
        },
    )


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def logout_user(request):
    AuthServices.logout(_refresh_token_from(request))
    logger.info(f"User logged out: {request.user.email}")

    response = standardize_response(True, "Logged out successfully")
    response.delete_cookie(REFRESH_COOKIE)
    return response


@api_view(["POST"])
@permission_classes([IsAdmin])
def create_admin(request):
    user = AuthServices.create_admin(request.data)
    return standardize_response(
        True,
        "Admin created successfully",
        {"user": serialize_user(user)},
        status_code=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([IsAdmin])
def pending_doctors(request):
    requests = [
        serialize_registration_request(application)
        for application in RegistrationRequestSelector.get_pending_requests()
    ]
    return standardize_response(
        True,
        "Pending doctor requests retrieved successfully",
        {"requests": requests, "count": len(requests)},
    )


@api_view(["POST"])
@permission_classes([IsAdmin])
def approve_doctor(request, request_id):
    doctor = auth_services.approve_doctor(request.user, request_id)
    return standardize_response(
        True, "Doctor approved successfully", {"doctor": serialize_doctor(doctor)}
    )


@api_view(["POST"])
@permission_classes([IsAdmin])
def reject_doctor(request, request_id):
    """
    POST /api/auth/reject-doctor/{id}  {"rejection_reason": "..."}
    """
    auth_services.reject_doctor(
        request.user, request_id, request.data.get("rejection_reason", "")
    )
    return standardize_response(True, "Doctor registration rejected")


# User management (admin)


@api_view(["GET"])
@permission_classes([IsAdmin])
def get_users_list(request):
    """
    GET /api/users

    Query parameters:
    - page, limit: Pagination (default 1, 50)
    - role, status: Filters
    - search: Name or email
    """
    try:
        page = int(request.GET.get("page", 1))
        limit = min(int(request.GET.get("limit", 50)), 100)
    except ValueError:
        raise ValidationError("Invalid query parameters")

    filters = {
        param: request.GET.get(param, "").strip()
        for param in ["role", "status", "search"]
        if request.GET.get(param, "").strip()
    }

    result = UserSelector.get_users_with_pagination(page, limit, filters)
    result["users"] = [serialize_user(user) for user in result["users"]]
    return standardize_response(True, "Users retrieved successfully", result)


@api_view(["GET"])
@permission_classes([IsAdmin])
def get_user_stats(request):
    return standardize_response(
        True, "User statistics retrieved successfully", UserSelector.get_user_stats()
    )


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAdmin])
def user_detail(request, user_id):
    if request.method == "DELETE":
        UserServices.delete_user(request.user, user_id)
        return standardize_response(True, "User deleted successfully")

    if request.method == "PUT":
        user = UserServices.update_user(user_id, request.data)
        return standardize_response(
            True, "User updated successfully", {"user": serialize_user(user)}
        )

    user = UserServices.get_user(user_id)
    data = {"user": serialize_user(user)}
    if user.role == UserType.DOCTOR.value:
        doctor = DoctorSelector.get_doctor_by_user(user.id)
        data["doctor_profile"] = serialize_doctor(doctor) if doctor else None
    elif user.role == UserType.PATIENT.value:
        data["appointment_count"] = UserSelector.count_patient_appointments(user.id)

    return standardize_response(True, "User retrieved successfully", data)


@api_view(["PUT"])
@permission_classes([IsAdmin])
def update_user_status(request, user_id):
    user = UserServices.update_user_status(user_id, request.data.get("status"))
    return standardize_response(
        True, "User status updated successfully", {"user": serialize_user(user)}
    )


# Doctors


@api_view(["GET", "POST"])
@permission_classes([IsAdminOrReadOnly])
def doctors(request):
    """
    GET  /api/doctors  public directory
    POST /api/doctors  create a profile for a doctor account (admin)

    Query parameters:
    - search: Name or specialization
    - specialization
    - min_rating, min_fee, max_fee
    - is_active: "false" to include inactive doctors
    """
    if request.method == "POST":
        doctor = DoctorServices.create_doctor(request.data)
        return standardize_response(
            True,
            "Doctor created successfully",
            {"doctor": serialize_doctor(doctor)},
            status_code=status.HTTP_201_CREATED,
        )

    filters = {
        "search": request.GET.get("search", "").strip(),
        "specialization": request.GET.get("specialization", "").strip(),
        "is_active": request.GET.get("is_active", "").strip(),
    }
    for param in ["min_rating", "min_fee", "max_fee"]:
        value = request.GET.get(param)
        if value:
            try:
                filters[param] = float(value)
            except ValueError:
                pass

    data = [serialize_doctor(d) for d in DoctorSelector.filter_doctors(filters)]
    return standardize_response(
        True, "Doctors list retrieved successfully", {"doctors": data, "count": len(data)}
    )


@api_view(["GET", "PUT", "DELETE"])
@permission_classes([IsAdminOrReadOnly])
def doctor_detail(request, doctor_id):
    if request.method == "DELETE":
        DoctorServices.delete_doctor(doctor_id)
        return standardize_response(True, "Doctor removed")

    if request.method == "PUT":
        doctor = DoctorServices.update_doctor(doctor_id, request.data)
        return standardize_response(
            True, "Doctor updated successfully", {"doctor": serialize_doctor(doctor)}
        )

    doctor = DoctorSelector.get_doctor_by_id(doctor_id)
    if not doctor:
        raise NotFoundError("Doctor not found")
    return standardize_response(
        True, "Doctor details retrieved successfully", {"doctor": serialize_doctor(doctor)}
    )


# Profile


@api_view(["GET", "PUT"])
@permission_classes([IsAuthenticated])
def profile(request):
    """
    GET /api/profile  own account, plus the doctor profile for doctors
    PUT /api/profile  name, phone, address, date_of_birth, gender
    """
    if request.method == "PUT":
        user = UserServices.update_profile(request.user, request.data)
        return standardize_response(
            True, "Profile updated successfully", {"user": serialize_user(user)}
        )

    data = {"user": serialize_user(request.user)}
    if request.user.role == UserType.DOCTOR.value:
        doctor = DoctorSelector.get_doctor_by_user(request.user.id)
        data["doctor_profile"] = serialize_doctor(doctor) if doctor else None
    return standardize_response(True, "Profile retrieved successfully", data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@parser_classes([MultiPartParser, FormParser])
def upload_profile_picture(request):
    """
    POST /api/profile/picture  multipart field "image"
    """
    url = UserServices.upload_profile_picture(request.user, request.FILES.get("image"))
    return standardize_response(
        True, "Profile picture uploaded successfully", {"profile_picture": url}
    )
