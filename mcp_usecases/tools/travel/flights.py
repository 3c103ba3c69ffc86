import logging
import random
from typing import Any, Dict, List, Optional

import httpx

from ...agent.cache import ToolCache
from ...config import Config
from ..common import epoch_ms, error_message, format_timestamp, parse_datetime
from .models import (
    BookFlightArgs,
    BookingConfirmation,
    CalendarEvent,
    ContactInfo,
    FlightBookingRequest,
    FlightInfo,
    FlightSearchArgs,
    FlightStatusArgs,
    PassengerInfo,
)

logger = logging.getLogger(__name__)

BASE_PRICE = 200
CLASS_MULTIPLIERS = {"economy": 1, "business": 3, "first": 5}


def flight_duration(departure: Optional[str], arrival: Optional[str]) -> Optional[str]:
    """Format the gap between two scheduled times as "<h>h <m>m"."""
    dep = parse_datetime(departure)
    arr = parse_datetime(arrival)
    if dep is None or arr is None:
        return None
    minutes = int((arr - dep).total_seconds() // 60)
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def kayak_url(origin: str, destination: str, departure_date: str) -> str:
    return f"https://www.kayak.com/flights/{origin}-{destination}/{departure_date}"


class FlightService:
    """Flight search and status through the Aviationstack REST API.

    Aviationstack carries schedules but no fares, so prices are estimated
    from the cabin class. Searches fall back to two static flights when the
    key is missing or the request fails.
    """

    BASE_URL = "http://api.aviationstack.com/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
        cache: Optional[ToolCache] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        self._rng = rng or random.Random()
        if cache is not None:
            self._search = cache.cached(self._search)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout)

    async def search_flights(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
        passengers: int = 1,
        flight_class: str = "economy",
    ) -> List[FlightInfo]:
        if not self.api_key:
            logger.warning("AVIATIONSTACK_API_KEY not set, returning mock flights")
            return self.mock_flights(origin, destination, departure_date)

        try:
            return await self._search(origin, destination, departure_date, flight_class)
        except Exception as e:
            logger.error(f"Error searching flights: {error_message(e)}")
            return self.mock_flights(origin, destination, departure_date)

    async def _search(self, origin: str, destination: str, departure_date: str, flight_class: str) -> List[FlightInfo]:
        params = {
            "access_key": self.api_key,
            "dep_iata": origin,
            "arr_iata": destination,
            "flight_date": departure_date,
            "limit": 50,
        }
        async with self._client() as client:
            response = await client.get(f"{self.BASE_URL}/flights", params=params)
            response.raise_for_status()
            data = response.json()
        return [
            self._to_flight_info(index, item, origin, destination, departure_date, flight_class)
            for index, item in enumerate(data.get("data") or [])
        ]

    def estimate_price(self, flight_class: str) -> int:
        multiplier = CLASS_MULTIPLIERS.get(flight_class, 1)
        return round(BASE_PRICE * multiplier * self._rng.uniform(0.8, 1.2))

    def _to_flight_info(
        self,
        index: int,
        item: Dict[str, Any],
        origin: str,
        destination: str,
        departure_date: str,
        flight_class: str,
    ) -> FlightInfo:
        departure = item.get("departure") or {}
        arrival = item.get("arrival") or {}
        return FlightInfo(
            id=f"flight_{index}_{epoch_ms()}",
            airline=(item.get("airline") or {}).get("name"),
            flight_number=(item.get("flight") or {}).get("iata"),
            origin=departure.get("iata"),
            destination=arrival.get("iata"),
            departure_time=departure.get("scheduled"),
            arrival_time=arrival.get("scheduled"),
            duration=flight_duration(departure.get("scheduled"), arrival.get("scheduled")),
            price=self.estimate_price(flight_class),
            currency="USD",
            aircraft=(item.get("aircraft") or {}).get("iata"),
            stops=0,
            booking_url=kayak_url(origin, destination, departure_date),
        )

    @staticmethod
    def mock_flights(origin: str, destination: str, departure_date: str) -> List[FlightInfo]:
        stamp = epoch_ms()
        url = kayak_url(origin, destination, departure_date)
        return [
            FlightInfo(
                id=f"mock_flight_1_{stamp}",
                airline="American Airlines",
                flight_number="AA1234",
                origin=origin,
                destination=destination,
                departure_time=f"{departure_date}T08:00:00Z",
                arrival_time=f"{departure_date}T12:30:00Z",
                duration="4h 30m",
                price=450,
                currency="USD",
                aircraft="Boeing 737",
                stops=0,
                booking_url=url,
            ),
            FlightInfo(
                id=f"mock_flight_2_{stamp}",
                airline="Delta Air Lines",
                flight_number="DL5678",
                origin=origin,
                destination=destination,
                departure_time=f"{departure_date}T14:15:00Z",
                arrival_time=f"{departure_date}T18:45:00Z",
                duration="4h 30m",
                price=520,
                currency="USD",
                aircraft="Airbus A320",
                stops=0,
                booking_url=url,
            ),
        ]

    async def get_flight_status(self, flight_number: str, date: str) -> Dict[str, Any]:
        """Raw Aviationstack payload for one flight, or an "unknown" status."""
        if not self.api_key:
            return {"status": "unknown", "message": "Flight status lookup is not configured"}

        params = {"access_key": self.api_key, "flight_iata": flight_number, "flight_date": date}
        try:
            async with self._client() as client:
                response = await client.get(f"{self.BASE_URL}/flights", params=params)
                response.raise_for_status()
                return response.json()
        except Exception as e:
            logger.error(f"Error getting flight status: {error_message(e)}")
            return {"status": "unknown", "message": "Unable to fetch flight status"}


def format_flight(flight: FlightInfo) -> str:
    return (
        f"{flight.airline or 'Unknown airline'} {flight.flight_number or ''}: "
        f"{flight.origin or '?'} → {flight.destination or '?'}\n"
        f"Departure: {format_timestamp(flight.departure_time)}\n"
        f"Arrival: {format_timestamp(flight.arrival_time)}\n"
        f"Duration: {flight.duration or 'Unknown'}\n"
        f"Price: {flight.currency or 'USD'} {flight.price if flight.price is not None else 'N/A'}\n"
        f"Stops: {flight.stops if flight.stops is not None else 'Unknown'}\n"
    )


def format_flight_status(flight_number: str, payload: Dict[str, Any]) -> str:
    if payload.get("status") == "unknown":
        return f"Status for {flight_number} is unknown: {payload.get('message', 'no details')}"

    records = payload.get("data") or []
    if not records:
        return f"No status information found for flight {flight_number}"

    record = records[0]
    departure = record.get("departure") or {}
    arrival = record.get("arrival") or {}
    return (
        f"Flight {flight_number}: {record.get('flight_status', 'unknown')}\n"
        f"From: {departure.get('airport') or departure.get('iata') or 'Unknown'}"
        f" (scheduled {format_timestamp(departure.get('scheduled'))})\n"
        f"To: {arrival.get('airport') or arrival.get('iata') or 'Unknown'}"
        f" (scheduled {format_timestamp(arrival.get('scheduled'))})\n"
        f"Departure delay: {departure.get('delay') or 0} min"
    )


def format_flight_booking(
    confirmation: BookingConfirmation, contact_email: str, calendar_event: Optional[CalendarEvent] = None
) -> str:
    calendar = "\n📅 Flight details have been added to your calendar" if calendar_event else ""
    return (
        "✅ Flight booked successfully!\n\n"
        f"Booking ID: {confirmation.booking_id}\n"
        f"Confirmation Number: {confirmation.confirmation_number}\n"
        f"Status: {confirmation.status}\n"
        f"Seats: {', '.join(confirmation.details.seat_assignments) or 'Unassigned'}\n"
        f"Total Price: {confirmation.currency} {confirmation.total_price}\n"
        f"Booking Date: {format_timestamp(confirmation.booking_date)}\n\n"
        f"📧 Confirmation email will be sent to {contact_email}"
        f"{calendar}"
    )


class FlightTools:
    """Tool handlers for flight search, booking and status."""

    def __init__(self, flights: FlightService, bookings):
        self.flights = flights
        self.bookings = bookings

    def register(self, server):
        server.register_tool(
            self.search_flights,
            description="Search for flights between airports with dates, passengers, and class preferences",
            args_model=FlightSearchArgs,
        )
        server.register_tool(
            self.book_flight,
            description="Book a flight with passenger information and contact details",
            args_model=BookFlightArgs,
        )
        server.register_tool(
            self.get_flight_status,
            description="Get the live status of a flight by its IATA number and date",
            args_model=FlightStatusArgs,
        )

    async def search_flights(
        self,
        origin: str,
        destination: str,
        departure_date: str,
        return_date: Optional[str] = None,
        passengers: int = 1,
        flight_class: str = "economy",
    ) -> str:
        try:
            flights = await self.flights.search_flights(
                origin, destination, departure_date, return_date, passengers, flight_class
            )
        except Exception as e:
            logger.error(f"Flight search failed: {e}")
            return f"❌ Error searching flights: {error_message(e)}"

        summary = "\n---\n".join(format_flight(flight) for flight in flights)
        return f"Found {len(flights)} flights from {origin} to {destination}:\n\n{summary}"

    async def book_flight(
        self, flight_id: str, passengers: List[PassengerInfo], contact_info: ContactInfo
    ) -> str:
        try:
            request = FlightBookingRequest(flight_id=flight_id, passengers=passengers, contact_info=contact_info)
            confirmation = await self.bookings.book_flight(request)
            event = await self.bookings.add_to_calendar(confirmation)
        except Exception as e:
            logger.error(f"Flight booking failed: {e}")
            return f"❌ Flight booking failed: {error_message(e)}\n\nPlease check your information and try again."
        return format_flight_booking(confirmation, contact_info.email, event)

    async def get_flight_status(self, flight_number: str, date: str) -> str:
        try:
            payload = await self.flights.get_flight_status(flight_number, date)
        except Exception as e:
            logger.error(f"Flight status lookup failed: {e}")
            return f"❌ Error getting flight status: {error_message(e)}"
        return format_flight_status(flight_number, payload)
