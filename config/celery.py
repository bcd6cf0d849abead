import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("healthcare_booking")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
app.autodiscover_tasks(["apps.celery"], related_name="celery_task")

# Celery Beat Schedule
app.conf.beat_schedule = {
    "send-appointment-reminders": {
        "task": "apps.celery.celery_task.send_appointment_reminders",
        "schedule": 3600.0,  # Run every hour
    },
}
