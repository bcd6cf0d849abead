from datetime import date, timedelta

import pytest
from django.core import mail

from apps.appointment.models import Appointment
from apps.appointment.services import AppointmentServices
from apps.notification import tasks
from apps.notification.dispatcher import NotificationDispatcher
from apps.notification.models import Notification
from apps.notification.services import NotificationServices

pytestmark = pytest.mark.django_db


def booking_payload(doctor):
    return {
        "doctor_id": doctor.id,
        "appointment_date": (date.today() + timedelta(days=2)).isoformat(),
        "appointment_time": "09:30",
        "appointment_type": "in-clinic",
    }


def test_emails_go_out_after_commit(patient, doctor, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        AppointmentServices().book_appointment(patient, booking_payload(doctor))

    assert len(callbacks) == 3
    recipients = sorted(message.to[0] for message in mail.outbox)
    assert recipients == sorted([patient.email, doctor.user.email])


def test_nothing_queued_before_commit(patient, doctor, django_capture_on_commit_callbacks, monkeypatch):
    queued = []
    monkeypatch.setattr(tasks.send_confirmation_email, "delay", lambda *args: queued.append(args))

    with django_capture_on_commit_callbacks(execute=False):
        AppointmentServices().book_appointment(patient, booking_payload(doctor))

    assert queued == []


def test_queue_failure_does_not_break_booking(patient, doctor, django_capture_on_commit_callbacks, monkeypatch):
    def broken(*args):
        raise ConnectionError("broker down")

    for task in (tasks.sync_appointment_calendars, tasks.send_confirmation_email, tasks.send_doctor_booking_email):
        monkeypatch.setattr(task, "delay", broken)

    with django_capture_on_commit_callbacks(execute=True):
        appointment = AppointmentServices().book_appointment(patient, booking_payload(doctor))

    assert Appointment.objects.filter(id=appointment.id, status="pending").exists()


def test_notification_failure_does_not_break_booking(patient_client, doctor, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("notifications table unavailable")

    monkeypatch.setattr(NotificationServices, "create_notification", broken)

    response = patient_client.post("/api/bookings", booking_payload(doctor), format="json")

    assert response.status_code == 201
    assert Appointment.objects.count() == 1
    assert not Notification.objects.exists()


def test_doctor_cancellation_notifies_patient(patient, doctor, appointment):
    appointment.cancelled_by = doctor.user
    appointment.cancellation_reason = "Doctor unavailable"

    NotificationDispatcher().appointment_cancelled(appointment)

    notification = Notification.objects.get(user=patient)
    assert notification.link == "/patient/appointments"


def test_calendar_sync_skipped_without_credentials(appointment, settings):
    settings.GOOGLE_CLIENT_EMAIL = ""

    result = tasks.sync_appointment_calendars(appointment.id)

    appointment.refresh_from_db()
    assert result["google"] is None
    assert appointment.google_calendar_event_id == ""


def test_tasks_tolerate_deleted_appointment(db):
    assert tasks.send_confirmation_email(9999) is False
