import logging

from celery import shared_task

from apps.account.models import User
from apps.appointment.models import Appointment
from apps.prescription.models import Prescription

from .calendar import CalendarService
from .services import EmailService

logger = logging.getLogger(__name__)


def _load_appointment(appointment_id: int):
    appointment = (
        Appointment.objects.select_related("doctor__user", "patient")
        .filter(id=appointment_id)
        .first()
    )
    if appointment is None:
        logger.warning(f"Appointment {appointment_id} vanished before side effects ran")
    return appointment


@shared_task
def sync_appointment_calendars(appointment_id: int):
    """Google first, then Apple; each id is stored only when the sync succeeds"""
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return {"google": None, "apple": None}

    result = {"google": None, "apple": None}
    try:
        google_event_id = CalendarService.sync_google(appointment)
        if google_event_id:
            Appointment.objects.filter(id=appointment_id).update(
                google_calendar_event_id=google_event_id
            )
            result["google"] = google_event_id
    except Exception as e:
        logger.error(f"Google Calendar sync error for appointment {appointment_id}: {str(e)}")

    try:
        apple_event_id = CalendarService.sync_apple(appointment)
        if apple_event_id:
            Appointment.objects.filter(id=appointment_id).update(
                apple_calendar_event_id=apple_event_id
            )
            result["apple"] = apple_event_id
    except Exception as e:
        logger.error(f"Apple Calendar sync error for appointment {appointment_id}: {str(e)}")

    return result


@shared_task(bind=True, max_retries=3)
def send_confirmation_email(self, appointment_id: int):
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return False
    try:
        return EmailService.send_appointment_confirmation(appointment)
    except Exception as exc:
        logger.error(f"Confirmation email failed for appointment {appointment_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_doctor_booking_email(self, appointment_id: int):
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return False
    try:
        return EmailService.send_doctor_notification(
            appointment, appointment.doctor.user.email
        )
    except Exception as exc:
        logger.error(f"Doctor notification failed for appointment {appointment_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_cancellation_email(self, appointment_id: int):
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return False
    try:
        return EmailService.send_appointment_cancellation(appointment)
    except Exception as exc:
        logger.error(f"Cancellation email failed for appointment {appointment_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_rescheduled_email(self, appointment_id: int):
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return False
    try:
        return EmailService.send_appointment_rescheduled(appointment)
    except Exception as exc:
        logger.error(f"Rescheduled email failed for appointment {appointment_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=2)
def send_reminder_email(self, appointment_id: int, hours_before: int):
    appointment = _load_appointment(appointment_id)
    if appointment is None:
        return False
    try:
        return EmailService.send_appointment_reminder(appointment, hours_before)
    except Exception as exc:
        logger.error(f"Reminder email failed for appointment {appointment_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60)


@shared_task(bind=True, max_retries=3)
def send_prescription_email(self, prescription_id: int):
    prescription = (
        Prescription.objects.select_related("appointment").filter(id=prescription_id).first()
    )
    if prescription is None:
        return False
    appointment = prescription.appointment
    try:
        return EmailService.send_prescription(
            prescription, appointment.patient_email, appointment.patient_name
        )
    except Exception as exc:
        logger.error(f"Prescription email failed for prescription {prescription_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))


@shared_task(bind=True, max_retries=3)
def send_doctor_application_email(self, user_id: int, approved: bool, reason: str = ""):
    user = User.objects.filter(id=user_id).first()
    if user is None:
        return False
    try:
        return EmailService.send_doctor_application_result(user, approved, reason)
    except Exception as exc:
        logger.error(f"Application result email failed for user {user_id}: {str(exc)}")
        raise self.retry(exc=exc, countdown=300)
