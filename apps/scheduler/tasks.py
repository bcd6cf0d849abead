import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from django.utils import timezone

from apps.appointment.selectors import AppointmentSelector
from apps.notification.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)

# (hours before the slot, width of the scan window); the scan runs hourly
REMINDER_WINDOWS = ((24, timedelta(hours=1)), (1, timedelta(hours=1)))


def send_appointment_reminders(
    now: Optional[datetime] = None,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> Dict[str, Any]:
    """
    Send reminders for active appointments starting 24 hours and 1 hour
    from now. Should be run every hour.
    """
    now = now or timezone.now()
    dispatcher = dispatcher or NotificationDispatcher()
    logger.info("Starting appointment reminder task")

    sent = {}
    failed_count = 0

    for hours_before, width in REMINDER_WINDOWS:
        window_start = now + timedelta(hours=hours_before)
        appointments = AppointmentSelector.get_appointments_for_reminders(
            window_start, window_start + width
        )
        sent[hours_before] = 0

        for appointment in appointments:
            try:
                dispatcher.appointment_reminder(appointment, hours_before)
                sent[hours_before] += 1
            except Exception as e:
                failed_count += 1
                logger.error(
                    f"Error sending {hours_before}h reminder for appointment {appointment.id}: {str(e)}"
                )

    logger.info(
        f"Appointment reminder task completed: {sent[24]} 24h reminders, "
        f"{sent[1]} 1h reminders, {failed_count} failed"
    )
    return {
        "success": True,
        "sent_24h": sent[24],
        "sent_1h": sent[1],
        "failed": failed_count,
    }


SCHEDULED_TASKS = {
    "send_appointment_reminders": {
        "function": send_appointment_reminders,
        "schedule": "Every hour",
        "description": "Send appointment reminders 24 hours and 1 hour before appointments",
    },
}


def run_task(task_name: str) -> Dict[str, Any]:
    """
    Manually run a specific task (useful for testing or manual execution)
    """
    if task_name not in SCHEDULED_TASKS:
        return {"success": False, "error": f"Task {task_name} not found"}

    try:
        task_function = SCHEDULED_TASKS[task_name]["function"]
        result = task_function()
        logger.info(f"Manually executed task {task_name}: {result}")
        return result
    except Exception as e:
        logger.error(f"Error manually running task {task_name}: {str(e)}")
        return {"success": False, "error": str(e)}
