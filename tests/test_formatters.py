import unittest

from mcp_usecases.tools.common import error_message, format_timestamp, parse_datetime
from mcp_usecases.tools.meetings.documents import format_summary, format_validation
from mcp_usecases.tools.meetings.models import DocumentContent, DocumentStats, DocumentSummary
from mcp_usecases.tools.restaurants.models import Reservation, Restaurant
from mcp_usecases.tools.restaurants.reservations import (
    format_cancellation,
    format_reservation,
    format_reservation_confirmation,
)
from mcp_usecases.tools.restaurants.restaurants import format_restaurant, format_restaurant_details
from mcp_usecases.tools.travel.calendar import format_conflict
from mcp_usecases.tools.travel.flights import format_flight, format_flight_booking, format_flight_status
from mcp_usecases.tools.travel.hotels import format_hotel, format_hotel_booking, format_hotel_details
from mcp_usecases.tools.travel.models import (
    BookingConfirmation,
    Conflict,
    FlightBookingDetails,
    FlightInfo,
    HotelBookingDetails,
    HotelResult,
    TravelPlan,
    TripBookingResult,
)
from mcp_usecases.tools.travel.plans import format_new_plan, format_plan, format_trip


class FormatterChecks:
    """Every optional field may be missing; formatting still succeeds and is repeatable."""

    def check(self, formatter, value):
        first = formatter(value)
        self.assertIsInstance(first, str)
        self.assertTrue(first)
        self.assertEqual(formatter(value), first)
        return first


class TestFormattersAreTotal(FormatterChecks, unittest.TestCase):

    def test_empty_flight(self):
        text = self.check(format_flight, FlightInfo())
        self.assertIn("Unknown airline", text)
        self.assertIn("Price: USD N/A", text)
        self.assertIn("Departure: Unknown", text)

    def test_empty_hotel(self):
        text = self.check(format_hotel, HotelResult())
        self.assertIn("Unnamed hotel (N/A⭐)", text)
        self.assertIn("Amenities: None listed", text)
        self.check(format_hotel_details, HotelResult())

    def test_empty_restaurant(self):
        text = self.check(format_restaurant, Restaurant())
        self.assertIn("Rating: N/A/5", text)
        self.assertIn("Price: N/A", text)
        details = self.check(format_restaurant_details, Restaurant())
        self.assertIn("Phone: Not available", details)

    def test_flight_status_without_records(self):
        self.assertEqual(format_flight_status("UA1", {}), "No status information found for flight UA1")

    def test_formatting_does_not_mutate(self):
        hotel = HotelResult(name="Inn", amenities=["a", "b", "c", "d", "e", "f"])
        before = hotel.model_dump()
        format_hotel_details(hotel)
        self.assertEqual(hotel.model_dump(), before)


STAMP = "2024-01-15T10:00:00Z"


def minimal_plan():
    return TravelPlan(
        id="TP1",
        title="Weekend",
        start_date="2024-06-15",
        end_date="2024-06-17",
        created_at=STAMP,
        updated_at=STAMP,
    )


class TestBookingFormatters(FormatterChecks, unittest.TestCase):
    def test_new_plan_and_plan(self):
        text = self.check(format_new_plan, minimal_plan())
        self.assertIn("Budget: Not set", text)
        self.assertIn("Destinations: \n", text)
        plan = self.check(format_plan, minimal_plan())
        self.assertIn("No flights booked yet", plan)
        self.assertIn("No hotels booked yet", plan)

    def test_trip_uses_result_booking_date(self):
        result = TripBookingResult(plan=minimal_plan(), booking_date=STAMP)
        text = self.check(lambda r: format_trip(r, "ada@example.com"), result)
        self.assertIn("Booking Date: 01/15/2024, 10:00:00 AM UTC", text)
        self.assertNotIn("Flights Booked", text)
        self.assertNotIn("calendar", text)

    def test_flight_and_hotel_confirmations(self):
        flight = BookingConfirmation(
            booking_id="FL1", confirmation_number="ABC123", booking_date=STAMP, details=FlightBookingDetails()
        )
        text = self.check(lambda c: format_flight_booking(c, "ada@example.com"), flight)
        self.assertIn("Seats: Unassigned", text)
        self.assertNotIn("calendar", text)

        hotel = BookingConfirmation(
            booking_id="HT1", confirmation_number="XYZ789", booking_date=STAMP, details=HotelBookingDetails()
        )
        text = self.check(
            lambda c: format_hotel_booking(c, "2024-06-15", "2024-06-18", 1, 2, "ada@example.com"), hotel
        )
        self.assertIn("Duration: 3 nights", text)

    def test_conflict_without_suggestion(self):
        conflict = Conflict(type="overlap", event_title="Standup", conflict_time=STAMP, severity="high")
        text = self.check(format_conflict, conflict)
        self.assertTrue(text.startswith("⚠️ HIGH: Standup"))
        self.assertIn("Suggestion: None", text)


class TestReservationFormatters(FormatterChecks, unittest.TestCase):
    RESERVATION = Reservation(
        id="res_1",
        restaurant_id="luigis-sf",
        date="2024-08-15",
        time="7:00 PM",
        party_size=2,
        customer_name="Ada",
        customer_email="ada@example.com",
        customer_phone="555-0100",
    )

    def test_reservation(self):
        text = self.check(format_reservation, self.RESERVATION)
        self.assertIn("Unknown Restaurant", text)
        self.assertNotIn("Special Requests", text)

    def test_confirmation_without_phone(self):
        text = self.check(format_reservation_confirmation, self.RESERVATION)
        self.assertIn("YOUR RESERVATION ID: res_1", text)
        self.assertNotIn("Call ", text)

    def test_cancellation(self):
        text = self.check(format_cancellation, self.RESERVATION)
        self.assertIn("Confirmation #: res_1", text)


class TestDocumentFormatters(FormatterChecks, unittest.TestCase):
    DOCUMENT = DocumentContent(title="Notes", content="", word_count=0)

    def test_empty_summary(self):
        text = self.check(lambda s: format_summary(self.DOCUMENT, s), DocumentSummary(summary=""))
        self.assertIn("No summary available", text)
        self.assertNotIn("Key Topics", text)
        self.assertNotIn("Action Items", text)

    def test_validation(self):
        stats = DocumentStats(word_count=0, character_count=0, paragraph_count=1, estimated_reading_time=0)
        text = self.check(lambda s: format_validation(self.DOCUMENT, s), stats)
        self.assertIn("• Title: Notes", text)
        self.assertIn("Estimated Reading Time: 0 minutes", text)


class TestCommonHelpers(unittest.TestCase):
    def test_parse_datetime(self):
        self.assertEqual(parse_datetime("2024-06-15").isoformat(), "2024-06-15T00:00:00+00:00")
        self.assertEqual(parse_datetime("2024-06-15T10:00:00-02:00").hour, 12)
        self.assertIsNone(parse_datetime("tomorrow"))
        self.assertIsNone(parse_datetime(None))

    def test_format_timestamp(self):
        self.assertEqual(format_timestamp("2024-06-15T15:04:05Z"), "06/15/2024, 03:04:05 PM UTC")
        self.assertEqual(format_timestamp("not a date"), "not a date")
        self.assertEqual(format_timestamp(None), "Unknown")

    def test_error_message(self):
        self.assertEqual(error_message(ValueError("bad input")), "bad input")
        self.assertEqual(error_message(RuntimeError()), "Unknown error")


if __name__ == "__main__":
    unittest.main()
