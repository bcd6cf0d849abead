from datetime import datetime
from typing import Dict, List, Optional

from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.appointment.utils import appointment_datetime
from core.enum import AppointmentStatus

from .models import Appointment


class AppointmentSelector:
    """Selector class for appointment-related queries"""

    @staticmethod
    def _base_queryset() -> QuerySet:
        return Appointment.objects.select_related(
            "doctor", "doctor__user", "patient", "prescription", "cancelled_by"
        )

    @classmethod
    def get_appointment_by_id(cls, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID with related data"""
        try:
            return cls._base_queryset().get(id=appointment_id)
        except Appointment.DoesNotExist:
            return None

    @staticmethod
    def get_appointment_for_update(appointment_id: int) -> Optional[Appointment]:
        """Row-locked fetch, must run inside transaction.atomic()"""
        try:
            return (
                Appointment.objects.select_for_update(of=("self",))
                .select_related("doctor__user")
                .get(id=appointment_id)
            )
        except Appointment.DoesNotExist:
            return None

    @staticmethod
    def _apply_filters(queryset: QuerySet, filters: Optional[Dict]) -> QuerySet:
        if not filters:
            return queryset

        if filters.get("status"):
            queryset = queryset.filter(status=filters["status"])
        if filters.get("date_from"):
            queryset = queryset.filter(appointment_date__gte=filters["date_from"])
        if filters.get("date_to"):
            queryset = queryset.filter(appointment_date__lte=filters["date_to"])
        if filters.get("doctor_id"):
            queryset = queryset.filter(doctor_id=filters["doctor_id"])
        if filters.get("patient_id"):
            queryset = queryset.filter(patient_id=filters["patient_id"])
        if filters.get("search"):
            search = filters["search"]
            queryset = queryset.filter(
                Q(patient_name__icontains=search) | Q(doctor__user__name__icontains=search)
            )
        return queryset

    @classmethod
    def get_patient_appointments(
        cls, patient_id: int, filters: Optional[Dict] = None
    ) -> QuerySet:
        """Get all appointments booked by a patient, latest first"""
        queryset = cls._base_queryset().filter(patient_id=patient_id)
        return cls._apply_filters(queryset, filters).order_by("-appointment_date")

    @classmethod
    def get_doctor_appointments(
        cls, doctor_id: int, filters: Optional[Dict] = None
    ) -> QuerySet:
        """Get all appointments for a doctor profile"""
        queryset = cls._base_queryset().filter(doctor_id=doctor_id)
        return cls._apply_filters(queryset, filters).order_by("-appointment_date")

    @classmethod
    def get_all_appointments_with_pagination(
        cls, page: int = 1, limit: int = 20, filters: Optional[Dict] = None
    ) -> Dict:
        queryset = cls._apply_filters(cls._base_queryset(), filters).order_by(
            "-appointment_date"
        )

        total = queryset.count()
        pages = (total + limit - 1) // limit
        current_page = max(page, 1)
        start = (current_page - 1) * limit

        return {
            "appointments": list(queryset[start : start + limit]),
            "total": total,
            "page": current_page,
            "limit": limit,
            "total_pages": pages,
        }

    @classmethod
    def get_appointments_for_reminders(
        cls, window_start: datetime, window_end: datetime
    ) -> List[Appointment]:
        """
        Active appointments whose slot falls in [window_start, window_end).
        Dates are narrowed in SQL; the free-text time is resolved in Python.
        """
        candidates = cls._base_queryset().filter(
            status__in=[
                AppointmentStatus.PENDING.value,
                AppointmentStatus.CONFIRMED.value,
            ],
            appointment_date__gte=timezone.localtime(window_start).date(),
            appointment_date__lte=timezone.localtime(window_end).date(),
        )

        due = []
        for appointment in candidates:
            slot = appointment_datetime(
                appointment.appointment_date, appointment.appointment_time
            )
            if slot is not None and window_start <= slot < window_end:
                due.append(appointment)
        return due

