import random
import unittest
from unittest.mock import AsyncMock, MagicMock, patch

from mcp_usecases.tools.travel.booking import BookingService
from mcp_usecases.tools.travel.flights import FlightService, FlightTools
from mcp_usecases.tools.travel.hotels import HotelService, HotelTools
from mcp_usecases.tools.travel.models import (
    ContactInfo,
    FlightBookingRequest,
    FlightInfo,
    GuestInfo,
    HotelBookingRequest,
    PassengerInfo,
    TripFlight,
    TripHotel,
)
from mcp_usecases.tools.travel.plans import TravelPlanTools

CONTACT = ContactInfo(email="ada@example.com", phone="555-0100", first_name="Ada", last_name="Lovelace")


def flight_request(passengers=2, flight=None):
    people = [
        {"first_name": f"P{i}", "last_name": "Smith", "date_of_birth": "1990-01-01"}
        for i in range(passengers)
    ]
    return FlightBookingRequest(flight_id="mock_flight_1", passengers=people, contact_info=CONTACT, flight=flight)


def hotel_request():
    return HotelBookingRequest(
        hotel_id="mock_hotel_1",
        check_in="2024-06-15",
        check_out="2024-06-18",
        rooms=1,
        guests=2,
        guest_info=[GuestInfo(first_name="Ada", last_name="Lovelace")],
        contact_info=CONTACT,
    )


class TestBookingService(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.bookings = BookingService(delay=0, rng=random.Random(7))

    async def test_book_flight(self):
        confirmation = await self.bookings.book_flight(flight_request(passengers=3))
        self.assertRegex(confirmation.booking_id, r"^FL\d{13}[0-9A-Z]{6}$")
        self.assertRegex(confirmation.confirmation_number, r"^[0-9A-Z]{6}$")
        self.assertEqual(confirmation.status, "confirmed")
        self.assertEqual(confirmation.total_price, 0)
        self.assertEqual(confirmation.details.type, "flight")

        seats = confirmation.details.seat_assignments
        self.assertEqual([seat[0] for seat in seats], ["A", "B", "C"])
        for seat in seats:
            self.assertTrue(1 <= int(seat[1:]) <= 30)

    async def test_book_hotel(self):
        confirmation = await self.bookings.book_hotel(hotel_request())
        self.assertRegex(confirmation.booking_id, r"^HT\d{13}[0-9A-Z]{6}$")
        self.assertEqual(confirmation.details.type, "hotel")
        self.assertEqual(confirmation.details.check_out, "2024-06-18")

    async def test_delay_is_simulated(self):
        bookings = BookingService(delay=1.5)
        with patch("mcp_usecases.tools.travel.booking.asyncio.sleep", new=AsyncMock()) as sleep:
            await bookings.book_hotel(hotel_request())
        sleep.assert_awaited_once_with(1.5)

    async def test_travel_plans(self):
        plan = await self.bookings.create_travel_plan("Spring", ["Lisbon"], "2024-04-01", "2024-04-05", 2, 1200)
        self.assertRegex(plan.id, r"^TP\d{13}[0-9A-Z]{6}$")
        self.assertEqual(plan.status, "planning")

        fixed = await self.bookings.get_travel_plan("TP123")
        self.assertEqual(fixed.id, "TP123")
        self.assertEqual(fixed.title, "European Adventure")
        self.assertEqual(fixed.destinations, ["Paris", "Rome", "Barcelona"])

    async def test_book_trip(self):
        result = await self.bookings.book_trip("TP1", [flight_request()], [hotel_request()])
        self.assertEqual(result.plan.status, "booked")
        self.assertEqual(len(result.flight_confirmations), 1)
        self.assertEqual(len(result.hotel_confirmations), 1)
        self.assertEqual(result.plan.flights, result.flight_confirmations)
        self.assertEqual(result.total_cost, 0)
        self.assertEqual(result.booking_date, result.plan.updated_at)
        self.assertEqual(result.calendar_events, [])

    async def test_book_trip_keeps_created_calendar_events(self):
        calendar = MagicMock()
        calendar.access_token = "token"
        calendar.create_event = AsyncMock(side_effect=lambda event: event)
        bookings = BookingService(calendar=calendar, delay=0)

        # The flight has no schedule so only the hotel stay reaches the calendar
        result = await bookings.book_trip("TP1", [flight_request()], [hotel_request()])
        self.assertEqual([event.summary for event in result.calendar_events], ["Hotel Stay - mock_hotel_1"])

    async def test_book_trip_failure_is_aggregated(self):
        self.bookings.book_hotel = AsyncMock(side_effect=ConnectionError("provider down"))
        with self.assertRaises(RuntimeError) as ctx:
            await self.bookings.book_trip("TP1", [flight_request()], [hotel_request()])
        self.assertEqual(str(ctx.exception), "Trip booking failed. Please try again.")
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)


class TestAddToCalendar(unittest.IsolatedAsyncioTestCase):
    def calendar(self, **kwargs):
        calendar = MagicMock()
        calendar.access_token = "token"
        calendar.create_event = AsyncMock(**kwargs)
        return calendar

    async def test_skipped_without_calendar(self):
        bookings = BookingService(delay=0)
        confirmation = await bookings.book_hotel(hotel_request())
        self.assertIsNone(await bookings.add_to_calendar(confirmation))

    async def test_hotel_stay_event(self):
        calendar = self.calendar(side_effect=lambda event: event)
        bookings = BookingService(calendar=calendar, delay=0)
        confirmation = await bookings.book_hotel(hotel_request())

        created = await bookings.add_to_calendar(confirmation)

        self.assertEqual(created.summary, "Hotel Stay - mock_hotel_1")
        self.assertEqual(created.start.date_time, "2024-06-15T15:00:00+00:00")
        self.assertEqual(created.end.date_time, "2024-06-18T11:00:00+00:00")

    async def test_flight_needs_schedule(self):
        calendar = self.calendar()
        bookings = BookingService(calendar=calendar, delay=0)
        confirmation = await bookings.book_flight(flight_request())
        self.assertIsNone(await bookings.add_to_calendar(confirmation))
        calendar.create_event.assert_not_awaited()

        flight = FlightInfo(
            flight_number="AA1234",
            origin="JFK",
            destination="LAX",
            departure_time="2024-06-15T08:00:00Z",
            arrival_time="2024-06-15T12:30:00Z",
        )
        confirmation = await bookings.book_flight(flight_request(flight=flight))
        await bookings.add_to_calendar(confirmation)
        event = calendar.create_event.await_args.args[0]
        self.assertEqual(event.summary, "Flight AA1234 - Departure")
        self.assertEqual(event.location, "JFK")

    async def test_calendar_failure_never_raises(self):
        bookings = BookingService(calendar=self.calendar(side_effect=RuntimeError("quota")), delay=0)
        confirmation = await bookings.book_hotel(hotel_request())
        self.assertIsNone(await bookings.add_to_calendar(confirmation))


class TestTravelPlanTools(unittest.IsolatedAsyncioTestCase):
    async def test_create_and_get(self):
        tools = TravelPlanTools(BookingService(delay=0))
        created = await tools.create_travel_plan("Spring", ["Lisbon", "Porto"], "2024-04-01", "2024-04-05", 2, 1500)
        self.assertIn("Destinations: Lisbon, Porto", created)
        self.assertIn("Budget: $1500", created)

        fetched = await tools.get_travel_plan("TP9")
        self.assertIn("Title: European Adventure", fetched)
        self.assertIn("Budget: $5000", fetched)
        self.assertIn("No flights booked yet", fetched)

    async def test_book_trip(self):
        tools = TravelPlanTools(BookingService(delay=0))
        trip_flight = TripFlight(
            flight_id="mock_flight_1",
            passengers=[{"first_name": "Ada", "last_name": "Lovelace", "date_of_birth": "1990-01-01"}],
        )
        text = await tools.book_trip("TP9", [trip_flight], [], CONTACT)
        self.assertTrue(text.startswith("🎉 Trip booked successfully!"))
        self.assertIn("Flights Booked (1)", text)
        self.assertIn("ada@example.com", text)
        self.assertNotIn("calendar", text)

    async def test_book_trip_reports_calendar_events(self):
        calendar = MagicMock()
        calendar.access_token = "token"
        calendar.create_event = AsyncMock(side_effect=lambda event: event)
        tools = TravelPlanTools(BookingService(calendar=calendar, delay=0))
        hotel = TripHotel(
            hotel_id="mock_hotel_1",
            check_in="2024-06-15",
            check_out="2024-06-18",
            rooms=1,
            guests=1,
            guest_info=[GuestInfo(first_name="Ada", last_name="Lovelace")],
        )
        text = await tools.book_trip("TP9", [], [hotel], CONTACT)
        self.assertIn("📅 Calendar events added: 1", text)


class TestBookingToolsCalendarLine(unittest.IsolatedAsyncioTestCase):
    PASSENGER = PassengerInfo(first_name="Ada", last_name="Lovelace", date_of_birth="1990-01-01")
    GUEST = GuestInfo(first_name="Ada", last_name="Lovelace")

    def calendar(self, **kwargs):
        calendar = MagicMock()
        calendar.access_token = "token"
        calendar.create_event = AsyncMock(**kwargs)
        return calendar

    async def book_hotel(self, bookings):
        tools = HotelTools(HotelService(), bookings)
        return await tools.book_hotel("mock_hotel_1", "2024-06-15", "2024-06-18", 1, 1, [self.GUEST], CONTACT)

    async def test_hotel_stay_added(self):
        bookings = BookingService(calendar=self.calendar(side_effect=lambda event: event), delay=0)
        text = await self.book_hotel(bookings)
        self.assertTrue(text.startswith("✅ Hotel booked successfully!"))
        self.assertIn("📅 Hotel stay has been added to your calendar", text)

    async def test_hotel_without_calendar(self):
        text = await self.book_hotel(BookingService(delay=0))
        self.assertNotIn("calendar", text)

    async def test_hotel_calendar_failure(self):
        bookings = BookingService(calendar=self.calendar(side_effect=RuntimeError("quota")), delay=0)
        self.assertNotIn("calendar", await self.book_hotel(bookings))

    async def test_flight_without_schedule(self):
        calendar = self.calendar(side_effect=lambda event: event)
        tools = FlightTools(FlightService(), BookingService(calendar=calendar, delay=0))
        text = await tools.book_flight("mock_flight_1", [self.PASSENGER], CONTACT)
        self.assertTrue(text.startswith("✅ Flight booked successfully!"))
        self.assertNotIn("calendar", text)
        calendar.create_event.assert_not_awaited()

    async def test_book_trip_failure_mentions_partial_bookings(self):
        bookings = MagicMock()
        bookings.book_trip = AsyncMock(side_effect=RuntimeError("Trip booking failed. Please try again."))
        text = await TravelPlanTools(bookings).book_trip("TP9", [], [], CONTACT)
        self.assertTrue(text.startswith("❌ Trip booking failed: Trip booking failed. Please try again."))
        self.assertIn("Some bookings may have been partially completed", text)


if __name__ == "__main__":
    unittest.main()
