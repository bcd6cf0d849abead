import logging
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.mail import send_mail

from core.exceptions import NotFoundError

from .models import Notification

logger = logging.getLogger(__name__)


class NotificationServices:
    """In-app notification rows"""

    @staticmethod
    def create_notification(
        user_id: int, notification_type: str, title: str, message: str, link: str = ""
    ) -> Notification:
        notification = Notification.objects.create(
            user_id=user_id,
            type=notification_type,
            title=title,
            message=message,
            link=link,
        )
        logger.info(f"Notification created for user {user_id}: {title}")
        return notification

    @staticmethod
    def get_user_notifications(user_id: int, unread_only: bool = False) -> Dict[str, Any]:
        queryset = Notification.objects.filter(user_id=user_id)
        unread_count = queryset.filter(is_read=False).count()
        if unread_only:
            queryset = queryset.filter(is_read=False)

        return {
            "notifications": list(queryset.order_by("-created_at")[:50]),
            "unread_count": unread_count,
        }

    @staticmethod
    def _get_own_notification(notification_id: int, user_id: int) -> Notification:
        notification = Notification.objects.filter(
            id=notification_id, user_id=user_id
        ).first()
        if not notification:
            raise NotFoundError("Notification not found")
        return notification

    @classmethod
    def mark_as_read(cls, notification_id: int, user_id: int) -> Notification:
        notification = cls._get_own_notification(notification_id, user_id)
        if not notification.is_read:
            notification.is_read = True
            notification.save(update_fields=["is_read", "updated_at"])
        return notification

    @staticmethod
    def mark_all_as_read(user_id: int) -> int:
        return Notification.objects.filter(user_id=user_id, is_read=False).update(
            is_read=True
        )

    @classmethod
    def delete_notification(cls, notification_id: int, user_id: int) -> None:
        notification = cls._get_own_notification(notification_id, user_id)
        notification.delete()


class EmailService:
    """
    Outbound email for lifecycle events.

    Every method raises on transport failure; callers run inside Celery
    tasks which log and retry.
    """

    @staticmethod
    def _send(subject: str, message: str, recipient: Optional[str]) -> bool:
        if not recipient:
            logger.warning(f"Skipping email '{subject}': no recipient address")
            return False

        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            fail_silently=False,
        )
        logger.info(f"Email '{subject}' sent to {recipient}")
        return True

    @staticmethod
    def _slot(appointment) -> str:
        return f"{appointment.appointment_date:%A, %B %d, %Y} at {appointment.appointment_time}"

    @classmethod
    def send_appointment_confirmation(cls, appointment) -> bool:
        message = f"""
Dear {appointment.patient_name},

Your appointment has been booked.

Date & time: {cls._slot(appointment)}
Type: {appointment.appointment_type}

Thank you for choosing our services.
        """
        return cls._send("Appointment Confirmation", message, appointment.patient_email)

    @classmethod
    def send_doctor_notification(cls, appointment, doctor_email: str) -> bool:
        message = f"""
You have a new appointment booking.

Patient: {appointment.patient_name}
Date & time: {cls._slot(appointment)}
Type: {appointment.appointment_type}
        """
        return cls._send("New Appointment Booking", message, doctor_email)

    @classmethod
    def send_appointment_cancellation(cls, appointment) -> bool:
        """Mail the counterparty of whoever cancelled"""
        if appointment.cancelled_by_id == appointment.patient_id:
            recipient_email = appointment.doctor.user.email
            recipient_name = f"Dr. {appointment.doctor.user.name}"
        else:
            recipient_email = appointment.patient_email
            recipient_name = appointment.patient_name

        reason = appointment.cancellation_reason
        message = f"""
Dear {recipient_name},

The appointment on {cls._slot(appointment)} has been cancelled.
{f"Reason: {reason}" if reason else ""}

If you need to reschedule, please book a new appointment.
        """
        return cls._send("Appointment Cancelled", message, recipient_email)

    @classmethod
    def send_appointment_rescheduled(cls, appointment) -> bool:
        message = f"""
Dear {appointment.patient_name},

Your appointment has been rescheduled and is awaiting confirmation.

New date & time: {cls._slot(appointment)}
Type: {appointment.appointment_type}

Please update your calendar accordingly.
        """
        return cls._send("Appointment Rescheduled", message, appointment.patient_email)

    @classmethod
    def send_appointment_reminder(cls, appointment, hours_before: int = 24) -> bool:
        plural = "s" if hours_before > 1 else ""
        message = f"""
Dear {appointment.patient_name},

This is a reminder that you have an appointment scheduled:

Date & time: {cls._slot(appointment)}
Doctor: Dr. {appointment.doctor.user.name}
Type: {appointment.appointment_type}

Please make sure to be available at the scheduled time.
        """
        return cls._send(
            f"Appointment Reminder - {hours_before} Hour{plural} Before",
            message,
            appointment.patient_email,
        )

    @classmethod
    def send_prescription(cls, prescription, patient_email: str, patient_name: str) -> bool:
        medications: List[str] = [
            f"- {med.get('name')} - {med.get('dosage')}, {med.get('frequency')}, {med.get('duration')}"
            for med in prescription.medications
        ]
        follow_up = prescription.follow_up_date
        message = f"""
Dear {patient_name},

Please find your prescription below.

Medications:
{chr(10).join(medications)}
{f"Instructions: {prescription.instructions}" if prescription.instructions else ""}
{f"Follow-up date: {follow_up:%B %d, %Y}" if follow_up else ""}

Please follow the prescription as directed by your doctor.
        """
        return cls._send("Your Prescription", message, patient_email)

    @classmethod
    def send_doctor_application_result(
        cls, user, approved: bool, reason: str = ""
    ) -> bool:
        if approved:
            subject = "Doctor Registration Approved"
            body = "Your doctor registration has been approved. You can now log in and manage your appointments."
        else:
            subject = "Doctor Registration Update"
            body = "Unfortunately your doctor registration was not approved."
            if reason:
                body += f"\nReason: {reason}"

        message = f"""
Dear {user.name},

{body}
        """
        return cls._send(subject, message, user.email)
