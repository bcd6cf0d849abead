"""
Calendar sync for new bookings.

Google events are created through the Calendar REST API with a service
account; Apple calendars have no server API, so an iCalendar payload is
generated and a reference id returned. Neither function raises: an
unparseable slot, missing credentials or an HTTP failure all yield None.
"""

import logging
import time
from datetime import datetime, timedelta, timezone as dt_timezone
from typing import Optional

import httpx
import jwt
from django.conf import settings
from django.utils import timezone

from apps.appointment.utils import appointment_datetime

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"
GOOGLE_CALENDAR_SCOPE = "https://www.googleapis.com/auth/calendar"
EVENT_DURATION = timedelta(minutes=30)


def _format_ical(value: datetime) -> str:
    return value.astimezone(dt_timezone.utc).strftime("%Y%m%dT%H%M%SZ")


class CalendarService:
    @staticmethod
    def _google_credentials():
        client_email = settings.GOOGLE_CLIENT_EMAIL
        private_key = settings.GOOGLE_PRIVATE_KEY
        if not client_email or not private_key:
            return None
        return client_email, private_key.replace("\\n", "\n")

    @staticmethod
    def _service_account_token(client_email: str, private_key: str) -> str:
        now = int(time.time())
        assertion = jwt.encode(
            {
                "iss": client_email,
                "scope": GOOGLE_CALENDAR_SCOPE,
                "aud": GOOGLE_TOKEN_URL,
                "iat": now,
                "exp": now + 3600,
            },
            private_key,
            algorithm="RS256",
        )
        response = httpx.post(
            GOOGLE_TOKEN_URL,
            data={
                "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                "assertion": assertion,
            },
            timeout=10,
        )
        response.raise_for_status()
        return response.json()["access_token"]

    @classmethod
    def sync_google(cls, appointment) -> Optional[str]:
        """Create a Google Calendar event, returning its id"""
        credentials = cls._google_credentials()
        if credentials is None:
            logger.info("Google Calendar credentials not configured, skipping sync")
            return None

        start = appointment_datetime(
            appointment.appointment_date, appointment.appointment_time
        )
        if start is None:
            logger.warning(
                f"Skipping Google Calendar sync for appointment {appointment.id}: invalid date"
            )
            return None
        end = start + EVENT_DURATION

        event = {
            "summary": f"Appointment with {appointment.patient_name}",
            "description": (
                f"Appointment Type: {appointment.appointment_type}\n"
                f"Symptoms: {appointment.symptoms or 'N/A'}"
            ),
            "start": {"dateTime": start.isoformat(), "timeZone": settings.CALENDAR_TIMEZONE},
            "end": {"dateTime": end.isoformat(), "timeZone": settings.CALENDAR_TIMEZONE},
            "attendees": [{"email": appointment.patient_email}],
            "reminders": {
                "useDefault": False,
                "overrides": [
                    {"method": "email", "minutes": 24 * 60},
                    {"method": "popup", "minutes": 10},
                ],
            },
        }

        try:
            access_token = cls._service_account_token(*credentials)
            response = httpx.post(
                f"{GOOGLE_CALENDAR_API}/calendars/{settings.GOOGLE_CALENDAR_ID}/events",
                json=event,
                headers={"Authorization": f"Bearer {access_token}"},
                timeout=10,
            )
            response.raise_for_status()
        except (httpx.HTTPError, jwt.PyJWTError, KeyError, ValueError) as e:
            logger.error(
                f"Error syncing appointment {appointment.id} to Google Calendar: {str(e)}"
            )
            return None

        event_id = response.json().get("id")
        logger.info(f"Google Calendar event {event_id} created for appointment {appointment.id}")
        return event_id

    @staticmethod
    def generate_ical(appointment) -> Optional[str]:
        start = appointment_datetime(
            appointment.appointment_date, appointment.appointment_time
        )
        if start is None:
            return None
        end = start + EVENT_DURATION
        location = "Online" if appointment.appointment_type == "online" else "In-Clinic"

        return "\r\n".join(
            [
                "BEGIN:VCALENDAR",
                "VERSION:2.0",
                "PRODID:-//Health App//Appointment Booking//EN",
                "BEGIN:VEVENT",
                f"UID:{appointment.id}@healthapp.com",
                f"DTSTAMP:{_format_ical(timezone.now())}",
                f"DTSTART:{_format_ical(start)}",
                f"DTEND:{_format_ical(end)}",
                f"SUMMARY:Appointment with {appointment.patient_name}",
                f"DESCRIPTION:Appointment Type: {appointment.appointment_type}",
                f"LOCATION:{location}",
                "END:VEVENT",
                "END:VCALENDAR",
            ]
        )

    @classmethod
    def sync_apple(cls, appointment) -> Optional[str]:
        """Build the iCalendar payload and hand back a reference id"""
        ical = cls.generate_ical(appointment)
        if ical is None:
            logger.warning(
                f"Skipping Apple Calendar sync for appointment {appointment.id}: invalid date"
            )
            return None
        return f"apple_cal_{appointment.id}_{int(time.time() * 1000)}"
