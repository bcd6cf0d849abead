import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from apps.account.models import Doctor, User
from apps.notification.dispatcher import NotificationDispatcher
from core.enum import AppointmentStatus, AppointmentType
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.policies import AccessPolicy
from core.validators import clean_text

from . import lifecycle
from .models import Appointment
from .selectors import AppointmentSelector
from .utils import parse_appointment_date

logger = logging.getLogger(__name__)


class AppointmentServices:
    """
    Appointment lifecycle: booking, cancellation, rescheduling, confirmation,
    completion, consultation notes and admin edits.

    Each operation authorizes first, checks the status graph second and only
    then writes the row; side effects go through the injected dispatcher.
    """

    ADMIN_WRITABLE_FIELDS = (
        "appointment_date",
        "appointment_time",
        "appointment_type",
        "status",
        "symptoms",
        "notes",
        "patient_name",
        "patient_email",
        "patient_phone",
        "cancellation_reason",
    )

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or NotificationDispatcher()

    @staticmethod
    def _get_locked(appointment_id: int) -> Appointment:
        appointment = AppointmentSelector.get_appointment_for_update(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    @staticmethod
    def _clean_date(value) -> Any:
        parsed = parse_appointment_date(value)
        if parsed is None:
            raise ValidationError("Invalid appointment date")
        return parsed

    @staticmethod
    def _clean_time(value) -> str:
        value = clean_text(
            value,
            "Appointment time",
            Appointment._meta.get_field("appointment_time").max_length,
        )
        if not value:
            raise ValidationError("Appointment time is required")
        return value

    @staticmethod
    def _clean_text(value, field: str, default: str = "") -> str:
        label = field.replace("_", " ").capitalize()
        return clean_text(value, label, Appointment._meta.get_field(field).max_length, default)

    @staticmethod
    def _clean_type(value) -> str:
        if not AppointmentType.has_value(value):
            raise ValidationError(
                f"Appointment type must be one of: {', '.join(AppointmentType.value_list())}"
            )
        return value

    def book_appointment(self, user: User, appointment_data: Dict[str, Any]) -> Appointment:
        """
        Book a new appointment for the requesting patient
        """
        AccessPolicy.ensure_can_book(user)

        doctor_id = appointment_data.get("doctor_id")
        if not all(
            [
                doctor_id,
                appointment_data.get("appointment_date"),
                appointment_data.get("appointment_time"),
            ]
        ):
            raise ValidationError("Doctor ID, appointment date, and time are required")

        appointment_date = self._clean_date(appointment_data["appointment_date"])
        appointment_time = self._clean_time(appointment_data["appointment_time"])
        appointment_type = self._clean_type(appointment_data.get("appointment_type"))

        try:
            doctor = Doctor.objects.select_related("user").get(id=doctor_id)
        except (Doctor.DoesNotExist, ValueError, TypeError):
            raise NotFoundError("Doctor not found")

        symptoms = self._clean_text(appointment_data.get("symptoms"), "symptoms")
        patient_name = self._clean_text(
            appointment_data.get("patient_name"), "patient_name", user.name
        )
        patient_email = self._clean_text(
            appointment_data.get("patient_email"), "patient_email", user.email
        )
        patient_phone = self._clean_text(
            appointment_data.get("patient_phone"), "patient_phone", user.phone or ""
        )

        with transaction.atomic():
            appointment = Appointment.objects.create(
                doctor=doctor,
                patient=user,
                patient_name=patient_name,
                patient_email=patient_email,
                patient_phone=patient_phone,
                appointment_date=appointment_date,
                appointment_time=appointment_time,
                appointment_type=appointment_type,
                symptoms=symptoms,
                status=AppointmentStatus.PENDING.value,
            )
            self.dispatcher.appointment_created(appointment)

        logger.info(
            f"Appointment booked: ID {appointment.id}, Patient: {user.email}, Doctor: {doctor.id}"
        )
        return appointment

    def get_appointment(self, user: User, appointment_id: int) -> Appointment:
        appointment = AppointmentSelector.get_appointment_by_id(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        AccessPolicy.ensure_can_view_appointment(user, appointment)
        return appointment

    def get_doctor_appointments(self, user: User, filters: Optional[Dict] = None):
        doctor = AccessPolicy.find_doctor_profile(user)
        if not doctor:
            raise NotFoundError("Doctor profile not found")
        return AppointmentSelector.get_doctor_appointments(doctor.id, filters)

    def cancel_appointment(
        self, user: User, appointment_id: int, cancellation_reason: str = ""
    ) -> Appointment:
        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            AccessPolicy.ensure_can_modify_booking(user, appointment, "cancel")
            lifecycle.ensure_cancellable(appointment.status)

            appointment.status = lifecycle.CANCELLED
            appointment.cancelled_at = timezone.now()
            appointment.cancellation_reason = (
                self._clean_text(cancellation_reason, "cancellation_reason")
                or lifecycle.DEFAULT_CANCELLATION_REASON
            )
            appointment.cancelled_by = user
            appointment.save(
                update_fields=[
                    "status",
                    "cancelled_at",
                    "cancellation_reason",
                    "cancelled_by",
                    "updated_at",
                ]
            )
            self.dispatcher.appointment_cancelled(appointment)

        logger.info(
            f"Appointment cancelled: ID {appointment.id}, by user {user.id}, Reason: {appointment.cancellation_reason}"
        )
        return appointment

    def reschedule_appointment(
        self,
        user: User,
        appointment_id: int,
        new_date=None,
        new_time: Optional[str] = None,
    ) -> Appointment:
        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            AccessPolicy.ensure_can_modify_booking(user, appointment, "reschedule")
            lifecycle.ensure_reschedulable(appointment.status)

            old_slot = f"{appointment.appointment_date} {appointment.appointment_time}"
            if new_date:
                appointment.appointment_date = self._clean_date(new_date)
            if new_time:
                appointment.appointment_time = self._clean_time(new_time)
            # A moved booking always needs to be confirmed again
            appointment.status = lifecycle.PENDING
            appointment.save(
                update_fields=[
                    "appointment_date",
                    "appointment_time",
                    "status",
                    "updated_at",
                ]
            )
            self.dispatcher.appointment_rescheduled(appointment)

        logger.info(
            f"Appointment rescheduled: ID {appointment.id}, {old_slot} -> "
            f"{appointment.appointment_date} {appointment.appointment_time}"
        )
        return appointment

    def confirm_appointment(self, user: User, appointment_id: int) -> Appointment:
        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            AccessPolicy.ensure_can_confirm(user, appointment)
            lifecycle.ensure_confirmable(appointment.status)

            appointment.status = lifecycle.CONFIRMED
            appointment.save(update_fields=["status", "updated_at"])

        logger.info(f"Appointment confirmed: ID {appointment.id}, by user {user.id}")
        return appointment

    def complete_appointment(self, user: User, appointment_id: int) -> Appointment:
        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            AccessPolicy.ensure_can_complete(user, appointment)

            if appointment.status == lifecycle.CANCELLED:
                logger.warning(f"Completing cancelled appointment {appointment.id}")
            old_status = appointment.status
            appointment.status = lifecycle.COMPLETED
            appointment.save(update_fields=["status", "updated_at"])

        logger.info(
            f"Appointment completed: ID {appointment.id}, {old_status} -> completed, by user {user.id}"
        )
        return appointment

    def add_consultation_notes(
        self, user: User, appointment_id: int, consultation_notes: Optional[str]
    ) -> Appointment:
        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            AccessPolicy.ensure_owning_doctor(
                user, appointment, "You can only add notes to your own appointments"
            )

            appointment.notes = self._clean_text(consultation_notes, "notes")
            appointment.save(update_fields=["notes", "updated_at"])

        logger.info(f"Consultation notes updated: ID {appointment.id}")
        return appointment

    def update_appointment(
        self, user: User, appointment_id: int, update_data: Dict[str, Any]
    ) -> Appointment:
        """
        Admin edit of any writable field; status changes still follow the graph
        """
        if not AccessPolicy.is_admin(user):
            raise AuthorizationError("Only admins can edit appointments")

        with transaction.atomic():
            appointment = self._get_locked(appointment_id)
            updated_fields = []

            for field in self.ADMIN_WRITABLE_FIELDS:
                if field not in update_data:
                    continue
                value = update_data[field]

                if field == "appointment_date":
                    value = self._clean_date(value)
                elif field == "appointment_time":
                    value = self._clean_time(value)
                elif field == "appointment_type":
                    value = self._clean_type(value)
                elif field == "status":
                    if not AppointmentStatus.has_value(value):
                        raise ValidationError("Invalid appointment status")
                    lifecycle.ensure_transition(appointment.status, value)
                    if value == lifecycle.CANCELLED and appointment.status != value:
                        appointment.cancelled_at = timezone.now()
                        appointment.cancelled_by = user
                        updated_fields += ["cancelled_at", "cancelled_by"]
                else:
                    value = self._clean_text(value, field)

                setattr(appointment, field, value)
                updated_fields.append(field)

            if updated_fields:
                appointment.save(update_fields=updated_fields + ["updated_at"])

        logger.info(f"Appointment updated by admin: ID {appointment.id}, fields {updated_fields}")
        return appointment
