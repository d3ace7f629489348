"""Google Calendar v3: insert interview / deadline reminder events.

Uses the caller's OAuth access token; there is no server-side credential.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from jobassist.errors import InvalidRequest
from jobassist.log import get_logger
from jobassist.models import CalendarReminder, ProviderKind
from jobassist.providers.base import Provider, http_json

log = get_logger(__name__)

EVENTS_URL = "https://www.googleapis.com/calendar/v3/calendars/primary/events"

_DURATION_MINUTES = {"interview": 60, "deadline": 30}
_OVERRIDES = {
    "interview": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 60},
        {"method": "popup", "minutes": 15},
    ],
    "deadline": [
        {"method": "email", "minutes": 24 * 60},
        {"method": "popup", "minutes": 60},
    ],
}


def parse_start(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except (AttributeError, ValueError) as exc:
        raise InvalidRequest(f"start is not an ISO-8601 datetime: {value!r}") from exc


def build_event(reminder: CalendarReminder) -> dict[str, Any]:
    """Event resource for *reminder*; pure, no I/O."""
    kind = reminder.reminder_type if reminder.reminder_type in _DURATION_MINUTES else "interview"
    start = parse_start(reminder.start)
    end = start + timedelta(minutes=_DURATION_MINUTES[kind])

    if kind == "deadline":
        summary = f"Application Deadline: {reminder.job_title} at {reminder.company}"
        description = (
            f"Don't forget to apply for {reminder.job_title} at {reminder.company}\n\n"
            f"Application URL: {reminder.application_url}\n\n"
            "Remember to:\n- Tailor your resume\n- Write a compelling cover letter\n"
            "- Double-check all requirements"
        )
    else:
        summary = f"Interview: {reminder.job_title} at {reminder.company}"
        description = f"Interview for {reminder.job_title} position at {reminder.company}"
        if reminder.notes:
            description += f"\n\n{reminder.notes}"

    return {
        "summary": summary,
        "description": description,
        "start": {"dateTime": start.isoformat(), "timeZone": reminder.time_zone},
        "end": {"dateTime": end.isoformat(), "timeZone": reminder.time_zone},
        "reminders": {"useDefault": False, "overrides": _OVERRIDES[kind]},
    }


class GoogleCalendarSource(Provider):
    name = "google-calendar"
    kind = ProviderKind.CALENDAR_WRITE
    shared_credential = False

    def fetch(self, request: CalendarReminder) -> dict[str, Any]:
        event = build_event(request)
        created = http_json(
            self.name,
            "POST",
            EVENTS_URL,
            json=event,
            headers={"Authorization": f"Bearer {request.access_token}"},
            timeout=self.settings.http_timeout,
        )
        log.info("Calendar event created: %s", event["summary"])
        return {"event": created, "created": True}
