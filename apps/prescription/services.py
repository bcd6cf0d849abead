import logging
from typing import Any, Dict, List, Optional

from django.db import transaction

from apps.account.models import User
from apps.appointment import lifecycle
from apps.appointment.models import Appointment
from apps.appointment.utils import parse_appointment_date
from apps.notification.dispatcher import NotificationDispatcher
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from core.policies import AccessPolicy
from core.validators import clean_text

from .models import Prescription

logger = logging.getLogger(__name__)

MEDICATION_FIELDS = ("name", "dosage", "frequency", "duration")


def clean_medications(medications) -> List[Dict[str, str]]:
    if not isinstance(medications, list) or not medications:
        raise ValidationError("At least one medication is required")

    cleaned = []
    for medication in medications:
        if not isinstance(medication, dict):
            raise ValidationError("Each medication must be an object")
        missing = [
            field for field in MEDICATION_FIELDS if not str(medication.get(field) or "").strip()
        ]
        if missing:
            raise ValidationError(f"Medication is missing: {', '.join(missing)}")
        cleaned.append({field: str(medication[field]).strip() for field in MEDICATION_FIELDS})
    return cleaned


def clean_follow_up_date(value):
    if value in (None, ""):
        return None
    parsed = parse_appointment_date(value)
    if parsed is None:
        raise ValidationError("Invalid follow-up date")
    return parsed


class PrescriptionServices:
    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None):
        self.dispatcher = dispatcher or NotificationDispatcher()

    def create_prescription(self, user: User, prescription_data: Dict[str, Any]) -> Prescription:
        """
        Issue a prescription for one of the doctor's appointments and link it
        to the appointment. The patient is notified in-app and by email.
        """
        appointment_id = prescription_data.get("appointment_id")
        if not appointment_id or not prescription_data.get("medications"):
            raise ValidationError("Appointment ID and medications are required")

        medications = clean_medications(prescription_data["medications"])
        follow_up_date = clean_follow_up_date(prescription_data.get("follow_up_date"))

        with transaction.atomic():
            appointment = (
                Appointment.objects.select_for_update(of=("self",))
                .select_related("doctor__user")
                .filter(id=appointment_id)
                .first()
            )
            if not appointment:
                raise NotFoundError("Appointment not found")

            AccessPolicy.ensure_owning_doctor(
                user,
                appointment,
                "You can only create prescriptions for your own appointments",
            )
            lifecycle.ensure_prescribable(appointment.status)

            prescription = Prescription.objects.create(
                appointment=appointment,
                doctor=user,
                patient_id=appointment.patient_id,
                medications=medications,
                instructions=clean_text(prescription_data.get("instructions"), "Instructions"),
                follow_up_date=follow_up_date,
            )

            if appointment.prescription_id:
                logger.warning(
                    f"Appointment {appointment.id} prescription replaced: "
                    f"{appointment.prescription_id} -> {prescription.id}"
                )
            appointment.prescription = prescription
            appointment.save(update_fields=["prescription", "updated_at"])

            self.dispatcher.prescription_issued(
                prescription, appointment, user.name or "Your doctor"
            )

        logger.info(
            f"Prescription created: ID {prescription.id}, Appointment {appointment.id}, Doctor {user.id}"
        )
        return prescription

    @staticmethod
    def list_prescriptions(user: User):
        queryset = Prescription.objects.select_related("appointment", "doctor", "patient")
        if AccessPolicy.is_patient(user):
            return queryset.filter(patient_id=user.id)
        if AccessPolicy.is_doctor(user):
            return queryset.filter(doctor_id=user.id)
        raise AuthorizationError("Access denied")

    @staticmethod
    def get_prescription(user: User, prescription_id: int) -> Prescription:
        prescription = (
            Prescription.objects.select_related("appointment", "doctor", "patient")
            .filter(id=prescription_id)
            .first()
        )
        if not prescription:
            raise NotFoundError("Prescription not found")
        AccessPolicy.ensure_can_view_prescription(user, prescription)
        return prescription

    @staticmethod
    def update_prescription(
        user: User, prescription_id: int, update_data: Dict[str, Any]
    ) -> Prescription:
        with transaction.atomic():
            prescription = (
                Prescription.objects.select_for_update().filter(id=prescription_id).first()
            )
            if not prescription:
                raise NotFoundError("Prescription not found")
            AccessPolicy.ensure_prescription_author(user, prescription)

            if update_data.get("medications"):
                prescription.medications = clean_medications(update_data["medications"])
            if "instructions" in update_data:
                prescription.instructions = clean_text(update_data.get("instructions"), "Instructions")
            if "follow_up_date" in update_data:
                prescription.follow_up_date = clean_follow_up_date(
                    update_data.get("follow_up_date")
                )
            prescription.save()

        logger.info(f"Prescription updated: ID {prescription.id}")
        return prescription
