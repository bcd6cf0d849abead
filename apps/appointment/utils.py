from datetime import date, datetime, time
from typing import Optional

from django.utils import timezone

TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")


def parse_appointment_date(value) -> Optional[date]:
    """
    Accepts a date, a datetime, "YYYY-MM-DD" or an ISO-8601 datetime string.
    Returns None when the value cannot be read as a calendar date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_appointment_time(value) -> Optional[time]:
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip().upper()
    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    return None


def appointment_datetime(appointment_date, appointment_time) -> Optional[datetime]:
    """Aware datetime for a booking slot, None if either part is unreadable"""
    parsed_date = parse_appointment_date(appointment_date)
    if parsed_date is None:
        return None
    parsed_time = parse_appointment_time(appointment_time) or time(0, 0)
    return timezone.make_aware(datetime.combine(parsed_date, parsed_time))
