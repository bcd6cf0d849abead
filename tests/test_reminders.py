from datetime import datetime, timedelta

import pytest
from django.core.management import call_command
from django.utils import timezone

from apps.celery.celery_task import send_appointment_reminders as reminder_task
from apps.notification.models import Notification
from apps.scheduler.tasks import run_task, send_appointment_reminders

from .conftest import make_appointment

pytestmark = pytest.mark.django_db


def slot(moment):
    local = timezone.localtime(moment)
    return {"appointment_date": local.date(), "appointment_time": local.strftime("%H:%M")}


@pytest.fixture
def now():
    return timezone.make_aware(datetime(2030, 5, 10, 8, 0))


def test_reminds_24h_and_1h_ahead(patient, doctor, now):
    make_appointment(patient, doctor, **slot(now + timedelta(hours=24, minutes=30)))
    make_appointment(patient, doctor, status="confirmed", **slot(now + timedelta(minutes=90)))
    make_appointment(patient, doctor, **slot(now + timedelta(hours=5)))

    result = send_appointment_reminders(now=now)

    assert result == {"success": True, "sent_24h": 1, "sent_1h": 1, "failed": 0}
    assert Notification.objects.filter(user=patient, type="reminder").count() == 2


def test_inactive_appointments_are_skipped(patient, doctor, now):
    make_appointment(patient, doctor, status="cancelled", **slot(now + timedelta(hours=24, minutes=10)))
    make_appointment(patient, doctor, status="completed", **slot(now + timedelta(hours=1, minutes=10)))

    result = send_appointment_reminders(now=now)

    assert result["sent_24h"] == 0
    assert result["sent_1h"] == 0


def test_unreadable_time_counts_as_midnight(patient, doctor):
    now = timezone.make_aware(datetime(2030, 5, 9, 23, 30))
    make_appointment(
        patient,
        doctor,
        appointment_date=(now + timedelta(hours=25)).date(),
        appointment_time="after lunch",
    )

    result = send_appointment_reminders(now=now)

    assert result["sent_24h"] == 1


def test_failed_reminder_is_counted(patient, doctor, now):
    make_appointment(patient, doctor, **slot(now + timedelta(hours=24, minutes=5)))

    class BrokenDispatcher:
        def appointment_reminder(self, appointment, hours_before):
            raise RuntimeError("smtp down")

    result = send_appointment_reminders(now=now, dispatcher=BrokenDispatcher())

    assert result["failed"] == 1
    assert result["sent_24h"] == 0


def test_run_task_unknown():
    assert run_task("nope") == {"success": False, "error": "Task nope not found"}


def test_celery_task_runs_eagerly(db):
    result = reminder_task.delay().get()
    assert result["success"] is True


def test_management_command_lists_tasks(capsys):
    call_command("run_scheduler_task", "--list")
    assert "send_appointment_reminders" in capsys.readouterr().out
