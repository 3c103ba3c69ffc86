import asyncio
import logging
import random
from typing import List, Optional

from ...config import Config
from ..common import epoch_ms, parse_datetime, random_token, utc_now_iso
from .calendar import CalendarService
from .models import (
    BookingConfirmation,
    CalendarEvent,
    EventTime,
    FlightBookingDetails,
    FlightBookingRequest,
    HotelBookingDetails,
    HotelBookingRequest,
    TravelPlan,
    TripBookingResult,
)

logger = logging.getLogger(__name__)

HOTEL_CHECK_IN_TIME = "T15:00:00"
HOTEL_CHECK_OUT_TIME = "T11:00:00"


class BookingService:
    """Simulated flight and hotel bookings plus travel plan bookkeeping.

    No real booking provider is called. Each booking waits ``delay`` seconds
    to stand in for one and then returns a confirmation with generated ids.
    """

    def __init__(
        self,
        calendar: Optional[CalendarService] = None,
        delay: float = Config.BOOKING_DELAY_SECONDS,
        rng: Optional[random.Random] = None,
    ):
        self.calendar = calendar
        self.delay = delay
        self._rng = rng or random.Random()

    def _booking_id(self, prefix: str) -> str:
        return f"{prefix}{epoch_ms()}{random_token(6, self._rng, upper=True)}"

    async def _simulate_provider(self):
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    async def book_flight(self, request: FlightBookingRequest) -> BookingConfirmation:
        logger.info(f"Processing flight booking for {request.flight_id}")
        await self._simulate_provider()

        seats = [f"{chr(65 + index)}{self._rng.randint(1, 30)}" for index in range(len(request.passengers))]
        return BookingConfirmation(
            booking_id=self._booking_id("FL"),
            confirmation_number=random_token(6, self._rng, upper=True),
            status="confirmed",
            total_price=0,
            currency="USD",
            booking_date=utc_now_iso(),
            details=FlightBookingDetails(
                flight_id=request.flight_id,
                flight=request.flight,
                passengers=request.passengers,
                seat_assignments=seats,
            ),
        )

    async def book_hotel(self, request: HotelBookingRequest) -> BookingConfirmation:
        logger.info(f"Processing hotel booking for {request.hotel_id}")
        await self._simulate_provider()

        return BookingConfirmation(
            booking_id=self._booking_id("HT"),
            confirmation_number=random_token(6, self._rng, upper=True),
            status="confirmed",
            total_price=0,
            currency="USD",
            booking_date=utc_now_iso(),
            details=HotelBookingDetails(
                hotel_id=request.hotel_id,
                hotel=request.hotel,
                check_in=request.check_in,
                check_out=request.check_out,
                rooms=request.rooms,
                guests=request.guest_info,
            ),
        )

    def _calendar_event(self, booking: BookingConfirmation) -> Optional[CalendarEvent]:
        details = booking.details
        if isinstance(details, FlightBookingDetails):
            flight = details.flight
            if flight is None or not flight.departure_time or not flight.arrival_time:
                return None
            return CalendarEvent(
                summary=f"Flight {flight.flight_number or details.flight_id} - Departure",
                description=(
                    f"Flight from {flight.origin} to {flight.destination}\n"
                    f"Confirmation: {booking.confirmation_number}"
                ),
                start=EventTime(date_time=flight.departure_time, time_zone="UTC"),
                end=EventTime(date_time=flight.arrival_time, time_zone="UTC"),
                location=flight.origin,
            )

        if not details.check_in or not details.check_out:
            return None
        start = parse_datetime(f"{details.check_in}{HOTEL_CHECK_IN_TIME}")
        end = parse_datetime(f"{details.check_out}{HOTEL_CHECK_OUT_TIME}")
        if start is None or end is None:
            return None
        hotel = details.hotel
        name = hotel.name if hotel and hotel.name else details.hotel_id
        address = hotel.address if hotel else None
        return CalendarEvent(
            summary=f"Hotel Stay - {name}",
            description=(
                "Hotel reservation\n"
                f"Confirmation: {booking.confirmation_number}\n"
                f"Address: {address or 'Unknown'}"
            ),
            start=EventTime(date_time=start.isoformat(), time_zone="UTC"),
            end=EventTime(date_time=end.isoformat(), time_zone="UTC"),
            location=address,
        )

    async def add_to_calendar(self, booking: BookingConfirmation) -> Optional[CalendarEvent]:
        """Best effort: put a booking in the calendar, never raising."""
        if self.calendar is None or not self.calendar.access_token:
            logger.info(f"Calendar not configured, skipping event for {booking.booking_id}")
            return None
        try:
            event = self._calendar_event(booking)
            if event is None:
                logger.info(f"Not enough booking data for a calendar event: {booking.booking_id}")
                return None
            return await self.calendar.create_event(event)
        except Exception as e:
            logger.error(f"Failed to add booking to calendar: {e}")
            return None

    async def create_travel_plan(
        self,
        title: str,
        destinations: List[str],
        start_date: str,
        end_date: str,
        travelers: int = 1,
        budget: Optional[float] = None,
    ) -> TravelPlan:
        now = utc_now_iso()
        plan = TravelPlan(
            id=self._booking_id("TP"),
            title=title,
            destinations=destinations,
            start_date=start_date,
            end_date=end_date,
            travelers=travelers,
            budget=budget,
            status="planning",
            created_at=now,
            updated_at=now,
        )
        # Plans are not persisted
        logger.info(f"Created travel plan {plan.id}")
        return plan

    async def get_travel_plan(self, plan_id: str) -> Optional[TravelPlan]:
        return TravelPlan(
            id=plan_id,
            title="European Adventure",
            destinations=["Paris", "Rome", "Barcelona"],
            start_date="2024-06-15",
            end_date="2024-06-25",
            travelers=2,
            budget=5000,
            status="planning",
            created_at="2024-01-15T10:00:00Z",
            updated_at="2024-01-15T10:00:00Z",
        )

    async def book_trip(
        self,
        plan_id: str,
        flight_bookings: List[FlightBookingRequest],
        hotel_bookings: List[HotelBookingRequest],
    ) -> TripBookingResult:
        """Book every flight then every hotel for a plan, in order.

        Bookings already made stay made when a later one fails; the caller
        gets one RuntimeError for the whole trip.
        """
        try:
            plan = await self.get_travel_plan(plan_id)
            if plan is None:
                raise LookupError("Travel plan not found")

            flight_confirmations = []
            for request in flight_bookings:
                flight_confirmations.append(await self.book_flight(request))

            hotel_confirmations = []
            for request in hotel_bookings:
                hotel_confirmations.append(await self.book_hotel(request))
        except Exception as e:
            logger.error(f"Trip booking failed for plan {plan_id}: {e}")
            raise RuntimeError("Trip booking failed. Please try again.") from e

        confirmations = flight_confirmations + hotel_confirmations
        total_cost = sum(confirmation.total_price for confirmation in confirmations)

        plan.status = "booked"
        plan.flights = flight_confirmations
        plan.hotels = hotel_confirmations
        plan.updated_at = utc_now_iso()

        calendar_events = []
        for confirmation in confirmations:
            event = await self.add_to_calendar(confirmation)
            if event is not None:
                calendar_events.append(event)

        return TripBookingResult(
            plan=plan,
            flight_confirmations=flight_confirmations,
            hotel_confirmations=hotel_confirmations,
            total_cost=total_cost,
            booking_date=plan.updated_at,
            calendar_events=calendar_events,
        )
