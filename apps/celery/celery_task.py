from celery import shared_task

from apps.scheduler.tasks import send_appointment_reminders as _send_reminders


@shared_task(bind=True, max_retries=3)
def send_appointment_reminders(self):
    """Celery task for sending appointment reminders"""
    try:
        return _send_reminders()
    except Exception as exc:
        # Retry with exponential backoff
        raise self.retry(exc=exc, countdown=60 * (2**self.request.retries))
