"""
Best-effort side effects of lifecycle events.

The dispatcher turns an event ("appointment created", "review received", ...)
into Celery tasks and in-app notification rows. Tasks are queued once the
surrounding transaction commits; any failure to queue or to write a
notification is logged and swallowed, so the caller's result never depends
on it.
"""

import logging

from django.db import transaction

from core.enum import NotificationType

from . import tasks
from .services import NotificationServices

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def _enqueue(self, task, *args) -> None:
        def _send():
            try:
                task.delay(*args)
            except Exception as e:
                logger.error(f"Failed to queue {task.name} with {args}: {str(e)}")

        transaction.on_commit(_send)

    def _notify(
        self, user_id: int, notification_type: str, title: str, message: str, link: str = ""
    ) -> None:
        if user_id is None:
            return
        try:
            # Savepoint keeps a failed insert from poisoning the caller's transaction
            with transaction.atomic():
                NotificationServices.create_notification(
                    user_id, notification_type, title, message, link
                )
        except Exception as e:
            logger.error(f"Failed to create notification for user {user_id}: {str(e)}")

    def appointment_created(self, appointment) -> None:
        self._enqueue(tasks.sync_appointment_calendars, appointment.id)
        self._enqueue(tasks.send_confirmation_email, appointment.id)
        self._enqueue(tasks.send_doctor_booking_email, appointment.id)
        self._notify(
            appointment.doctor.user_id,
            NotificationType.APPOINTMENT.value,
            "New Appointment Booking",
            f"{appointment.patient_name} booked an appointment on "
            f"{appointment.appointment_date} at {appointment.appointment_time}",
            "/doctor/appointments",
        )

    def appointment_cancelled(self, appointment) -> None:
        self._enqueue(tasks.send_cancellation_email, appointment.id)
        if appointment.cancelled_by_id == appointment.patient_id:
            recipient_id, link = appointment.doctor.user_id, "/doctor/appointments"
        else:
            recipient_id, link = appointment.patient_id, "/patient/appointments"
        self._notify(
            recipient_id,
            NotificationType.APPOINTMENT.value,
            "Appointment Cancelled",
            f"The appointment on {appointment.appointment_date} at "
            f"{appointment.appointment_time} was cancelled: {appointment.cancellation_reason}",
            link,
        )

    def appointment_rescheduled(self, appointment) -> None:
        self._enqueue(tasks.send_rescheduled_email, appointment.id)

    def appointment_reminder(self, appointment, hours_before: int) -> None:
        self._enqueue(tasks.send_reminder_email, appointment.id, hours_before)
        plural = "s" if hours_before > 1 else ""
        self._notify(
            appointment.patient_id,
            NotificationType.REMINDER.value,
            "Appointment Reminder",
            f"Your appointment is in {hours_before} hour{plural} "
            f"({appointment.appointment_date} at {appointment.appointment_time})",
            "/patient/appointments",
        )

    def review_received(self, review, reviewer_name: str) -> None:
        self._notify(
            review.doctor.user_id,
            NotificationType.REVIEW.value,
            "New Review Received",
            f"You received a {review.rating}-star review from {reviewer_name}",
            f"/doctors/{review.doctor_id}",
        )

    def prescription_issued(self, prescription, appointment, doctor_name: str) -> None:
        self._notify(
            appointment.patient_id,
            NotificationType.PRESCRIPTION.value,
            "New Prescription from Doctor",
            f"Dr. {doctor_name} has sent you a new prescription for your appointment "
            f"on {appointment.appointment_date}. Please check your prescriptions section.",
            "/patient/prescriptions",
        )
        self._enqueue(tasks.send_prescription_email, prescription.id)

    def doctor_application_reviewed(self, user, approved: bool, reason: str = "") -> None:
        if approved:
            notification_type = NotificationType.APPROVAL.value
            title = "Registration Approved"
            message = "Your doctor registration has been approved."
        else:
            notification_type = NotificationType.REJECTION.value
            title = "Registration Rejected"
            message = f"Your doctor registration was rejected. {reason}".strip()
        self._notify(user.id, notification_type, title, message)
        self._enqueue(tasks.send_doctor_application_email, user.id, approved, reason)
