from typing import Dict, Optional

from django.db.models import Q, QuerySet

from apps.appointment.models import Appointment
from core.enum import AccountStatus, RegistrationStatus, UserType

from .models import Doctor, DoctorRegistrationRequest, User


class UserSelector:
    """Selector class for user-related queries"""

    @staticmethod
    def get_user_by_id(user_id: int) -> Optional[User]:
        try:
            return User.objects.get(id=user_id)
        except User.DoesNotExist:
            return None

    @staticmethod
    def get_user_by_email(email: str) -> Optional[User]:
        """Get user by email, case-insensitively"""
        return User.objects.filter(email__iexact=email).first()

    @staticmethod
    def check_email_exists(email: str, exclude_id: int = None) -> bool:
        queryset = User.objects.filter(email__iexact=email)
        if exclude_id:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    @staticmethod
    def get_users_with_pagination(
        page: int = 1, limit: int = 50, filters: dict = None
    ) -> dict:
        """Get paginated list of users, newest first"""
        queryset = User.objects.all()

        if filters:
            if filters.get("role"):
                queryset = queryset.filter(role=filters["role"])
            if filters.get("status"):
                queryset = queryset.filter(status=filters["status"])
            if filters.get("search"):
                search = filters["search"]
                queryset = queryset.filter(
                    Q(name__icontains=search) | Q(email__icontains=search)
                )

        total = queryset.count()
        pages = (total + limit - 1) // limit
        current_page = max(page, 1)
        start = (current_page - 1) * limit
        end = start + limit

        return {
            "users": list(queryset.order_by("-created_at")[start:end]),
            "total": total,
            "page": current_page,
            "limit": limit,
            "total_pages": pages,
        }

    @staticmethod
    def get_user_stats() -> Dict[str, int]:
        total_users = User.objects.count()
        pending_users = User.objects.filter(status=AccountStatus.PENDING.value).count()
        approved_users = User.objects.filter(status=AccountStatus.APPROVED.value).count()

        return {
            "total_users": total_users,
            "total_patients": User.objects.filter(role=UserType.PATIENT.value).count(),
            "total_doctors": User.objects.filter(role=UserType.DOCTOR.value).count(),
            "total_admins": User.objects.filter(role=UserType.ADMIN.value).count(),
            "pending_users": pending_users,
            "approved_users": approved_users,
            "rejected_users": total_users - pending_users - approved_users,
        }

    @staticmethod
    def count_patient_appointments(user_id: int) -> int:
        return Appointment.objects.filter(patient_id=user_id).count()


class DoctorSelector:
    """Selector class for doctor-related queries"""

    @staticmethod
    def get_doctor_by_id(doctor_id: int) -> Optional[Doctor]:
        try:
            return Doctor.objects.select_related("user").get(id=doctor_id)
        except Doctor.DoesNotExist:
            return None

    @staticmethod
    def get_doctor_by_user(user_id: int) -> Optional[Doctor]:
        return Doctor.objects.select_related("user").filter(user_id=user_id).first()

    @staticmethod
    def filter_doctors(filters: Optional[Dict] = None) -> QuerySet:
        """
        Public doctor directory. Only active doctors are listed unless
        is_active is explicitly "false"; best rated first.
        """
        filters = filters or {}
        queryset = Doctor.objects.select_related("user")

        if filters.get("is_active") != "false":
            queryset = queryset.filter(is_active=True)

        if filters.get("specialization"):
            queryset = queryset.filter(specialization__icontains=filters["specialization"])

        if filters.get("min_rating") is not None:
            queryset = queryset.filter(rating__gte=filters["min_rating"])

        if filters.get("min_fee") is not None:
            queryset = queryset.filter(consultation_fee__gte=filters["min_fee"])

        if filters.get("max_fee") is not None:
            queryset = queryset.filter(consultation_fee__lte=filters["max_fee"])

        if filters.get("search"):
            search = filters["search"]
            queryset = queryset.filter(
                Q(user__name__icontains=search) | Q(specialization__icontains=search)
            )

        return queryset.order_by("-rating", "-total_reviews")


class RegistrationRequestSelector:
    @staticmethod
    def get_pending_requests() -> QuerySet:
        return (
            DoctorRegistrationRequest.objects.filter(
                status=RegistrationStatus.PENDING.value
            )
            .select_related("user")
            .order_by("-created_at")
        )

    @staticmethod
    def get_request_for_update(request_id: int) -> Optional[DoctorRegistrationRequest]:
        return (
            DoctorRegistrationRequest.objects.select_for_update()
            .filter(id=request_id)
            .first()
        )
