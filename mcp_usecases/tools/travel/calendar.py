import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx

from ...config import Config
from ..common import error_message, format_timestamp, parse_datetime
from .models import CalendarConflictArgs, CalendarEvent, Conflict, EventTime

logger = logging.getLogger(__name__)

DEPARTURE_BUFFER = timedelta(hours=4)
TOO_CLOSE = timedelta(hours=1)
TRAVEL_LOCATION_HINTS = ("airport", "terminal", "gate")


def _iso_z(value: datetime) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _event_bounds(event: CalendarEvent):
    start = parse_datetime(event.start.date_time or event.start.date)
    end = parse_datetime(event.end.date_time or event.end.date)
    return start, end


def check_conflicts(events: List[CalendarEvent], start_date: str, end_date: str) -> List[Conflict]:
    """Compare calendar events against a travel window.

    An event can raise several conflicts at once. Events whose start or end
    cannot be parsed are skipped.
    """
    travel_start = parse_datetime(start_date)
    travel_end = parse_datetime(end_date)
    if travel_start is None or travel_end is None:
        raise ValueError(f"Invalid travel dates: {start_date} to {end_date}")

    departure_buffer = travel_start - DEPARTURE_BUFFER
    conflicts = []

    for event in events:
        event_start, event_end = _event_bounds(event)
        if event_start is None or event_end is None:
            logger.debug(f"Skipping event without usable times: {event.id}")
            continue

        conflict_time = _iso_z(event_start)

        def add(kind: str, severity: str, suggestion: str):
            conflicts.append(Conflict(
                type=kind,
                event_id=event.id,
                event_title=event.summary,
                conflict_time=conflict_time,
                severity=severity,
                suggestion=suggestion,
            ))

        if event_start < travel_end and travel_start < event_end:
            add("overlap", "high", "Consider rescheduling this event or adjusting travel dates")

        if abs(event_end - departure_buffer) < TOO_CLOSE:
            add("tight_schedule", "medium", "Allow more time between this event and travel departure")

        if abs(travel_end - event_start) < TOO_CLOSE:
            add("tight_schedule", "medium", "Allow more time between travel return and this event")

        location = (event.location or "").lower()
        if any(hint in location for hint in TRAVEL_LOCATION_HINTS):
            add("travel_time", "low", "Consider travel time to/from this event location")

    return conflicts


class CalendarService:
    """Google Calendar v3 access for the primary calendar using a bearer token."""

    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: Optional[str] = None,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    @property
    def events_url(self) -> str:
        return f"{self.BASE_URL}/calendars/primary/events"

    def _client(self) -> httpx.AsyncClient:
        headers = {"Authorization": f"Bearer {self.access_token or ''}"}
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout, headers=headers)

    async def get_events(self, start: str, end: str) -> List[CalendarEvent]:
        if not self.access_token:
            logger.warning("GOOGLE_ACCESS_TOKEN not set, returning mock events")
            return self.mock_events(start)

        try:
            params = {
                "timeMin": _iso_z(parse_datetime(start)),
                "timeMax": _iso_z(parse_datetime(end)),
                "singleEvents": "true",
                "orderBy": "startTime",
            }
            async with self._client() as client:
                response = await client.get(self.events_url, params=params)
                response.raise_for_status()
                items = response.json().get("items") or []
            return [self._to_event(item) for item in items]
        except Exception as e:
            logger.error(f"Error fetching calendar events: {error_message(e)}")
            return self.mock_events(start)

    @staticmethod
    def _to_event(item: Dict[str, Any]) -> CalendarEvent:
        return CalendarEvent(
            id=item.get("id"),
            summary=item.get("summary") or "No title",
            description=item.get("description"),
            start=EventTime.from_api(item.get("start")),
            end=EventTime.from_api(item.get("end")),
            location=item.get("location"),
        )

    @staticmethod
    def _to_payload(event: CalendarEvent) -> Dict[str, Any]:
        payload = {
            "summary": event.summary,
            "description": event.description,
            "start": event.start.to_api(),
            "end": event.end.to_api(),
            "location": event.location,
        }
        return {k: v for k, v in payload.items() if v is not None}

    @staticmethod
    def mock_events(start: str) -> List[CalendarEvent]:
        base = parse_datetime(start) or datetime.now(timezone.utc)
        first = base + timedelta(days=1)
        second = (base + timedelta(days=2)).replace(hour=14, minute=0, second=0, microsecond=0)
        return [
            CalendarEvent(
                id="mock_event_1",
                summary="Team Meeting",
                description="Weekly team sync meeting",
                start=EventTime(date_time=_iso_z(first), time_zone="America/New_York"),
                end=EventTime(date_time=_iso_z(first + timedelta(hours=1)), time_zone="America/New_York"),
                location="Conference Room A",
            ),
            CalendarEvent(
                id="mock_event_2",
                summary="Client Presentation",
                description="Quarterly business review with client",
                start=EventTime(date_time=_iso_z(second), time_zone="America/New_York"),
                end=EventTime(date_time=_iso_z(second + timedelta(hours=2)), time_zone="America/New_York"),
                location="Client Office",
            ),
        ]

    async def create_event(self, event: CalendarEvent) -> Optional[CalendarEvent]:
        try:
            async with self._client() as client:
                response = await client.post(self.events_url, json=self._to_payload(event))
                response.raise_for_status()
                return self._to_event(response.json())
        except Exception as e:
            logger.error(f"Error creating calendar event: {error_message(e)}")
            return None

    async def update_event(self, event_id: str, updates: CalendarEvent) -> Optional[CalendarEvent]:
        try:
            async with self._client() as client:
                response = await client.patch(f"{self.events_url}/{event_id}", json=self._to_payload(updates))
                response.raise_for_status()
                return self._to_event(response.json())
        except Exception as e:
            logger.error(f"Error updating calendar event: {error_message(e)}")
            return None

    async def delete_event(self, event_id: str) -> bool:
        try:
            async with self._client() as client:
                response = await client.delete(f"{self.events_url}/{event_id}")
                return response.is_success
        except Exception as e:
            logger.error(f"Error deleting calendar event: {error_message(e)}")
            return False


def format_conflict(conflict: Conflict) -> str:
    return (
        f"⚠️ {conflict.severity.upper()}: {conflict.event_title}\n"
        f"Type: {conflict.type}\n"
        f"Time: {format_timestamp(conflict.conflict_time)}\n"
        f"Suggestion: {conflict.suggestion or 'None'}\n"
    )


class CalendarTools:
    def __init__(self, calendar: CalendarService):
        self.calendar = calendar

    def register(self, server):
        server.register_tool(
            self.check_calendar_conflicts,
            description="Check your Google Calendar for conflicts with travel dates",
            args_model=CalendarConflictArgs,
        )

    async def check_calendar_conflicts(self, start_date: str, end_date: str) -> str:
        try:
            travel_start = parse_datetime(start_date)
            travel_end = parse_datetime(end_date)
            if travel_start is None or travel_end is None:
                raise ValueError(f"Invalid travel dates: {start_date} to {end_date}")

            # Look one day either side so events next to the trip count too
            window_start = _iso_z(travel_start - timedelta(days=1))
            window_end = _iso_z(travel_end + timedelta(days=1))
            events = await self.calendar.get_events(window_start, window_end)
            conflicts = check_conflicts(events, start_date, end_date)
        except Exception as e:
            logger.error(f"Calendar conflict check failed: {e}")
            return f"❌ Error checking calendar conflicts: {error_message(e)}"

        if not conflicts:
            return (
                f"No calendar conflicts found for travel dates {start_date} to {end_date}. "
                "You're all clear to travel!"
            )
        summary = "\n---\n".join(format_conflict(conflict) for conflict in conflicts)
        return f"Found {len(conflicts)} potential conflicts for travel dates {start_date} to {end_date}:\n\n{summary}"
