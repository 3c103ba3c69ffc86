import logging
from typing import List, Optional

from ..common import error_message, format_timestamp
from .booking import BookingService
from .models import (
    BookTripArgs,
    ContactInfo,
    CreateTravelPlanArgs,
    FlightBookingRequest,
    GetTravelPlanArgs,
    HotelBookingRequest,
    TravelPlan,
    TripBookingResult,
    TripFlight,
    TripHotel,
)

logger = logging.getLogger(__name__)


def _budget(plan: TravelPlan) -> str:
    return f"${plan.budget:g}" if plan.budget else "Not set"


def format_new_plan(plan: TravelPlan) -> str:
    return (
        "✅ Travel plan created successfully!\n\n"
        f"Plan ID: {plan.id}\n"
        f"Title: {plan.title}\n"
        f"Destinations: {', '.join(plan.destinations)}\n"
        f"Dates: {plan.start_date} to {plan.end_date}\n"
        f"Travelers: {plan.travelers}\n"
        f"Budget: {_budget(plan)}\n"
        f"Status: {plan.status}\n\n"
        f"🎯 Use this Plan ID ({plan.id}) to search for flights and hotels, then book your complete trip!"
    )


def format_plan(plan: TravelPlan) -> str:
    if plan.flights:
        flights = f"\n\n✈️ Flights ({len(plan.flights)}):\n" + "\n".join(
            f"- {f.confirmation_number} ({f.status})" for f in plan.flights
        )
    else:
        flights = "\n\n✈️ No flights booked yet"

    if plan.hotels:
        hotels = f"\n\n🏨 Hotels ({len(plan.hotels)}):\n" + "\n".join(
            f"- {h.confirmation_number} ({h.status})" for h in plan.hotels
        )
    else:
        hotels = "\n\n🏨 No hotels booked yet"

    return (
        "📋 Travel Plan Details\n\n"
        f"Plan ID: {plan.id}\n"
        f"Title: {plan.title}\n"
        f"Destinations: {', '.join(plan.destinations)}\n"
        f"Dates: {plan.start_date} to {plan.end_date}\n"
        f"Travelers: {plan.travelers}\n"
        f"Budget: {_budget(plan)}\n"
        f"Status: {plan.status}\n"
        f"Created: {format_timestamp(plan.created_at)}\n"
        f"Updated: {format_timestamp(plan.updated_at)}"
        + flights
        + hotels
    )


def format_trip(result: TripBookingResult, contact_email: str) -> str:
    flights = ""
    if result.flight_confirmations:
        flights = f"\n\n✈️ Flights Booked ({len(result.flight_confirmations)}):\n" + "\n".join(
            f"- {f.confirmation_number} ({f.status}) - {f.currency} {f.total_price}"
            for f in result.flight_confirmations
        )
    hotels = ""
    if result.hotel_confirmations:
        hotels = f"\n\n🏨 Hotels Booked ({len(result.hotel_confirmations)}):\n" + "\n".join(
            f"- {h.confirmation_number} ({h.status}) - {h.currency} {h.total_price}"
            for h in result.hotel_confirmations
        )

    calendar = ""
    if result.calendar_events:
        calendar = f"📅 Calendar events added: {len(result.calendar_events)}\n"

    return (
        "🎉 Trip booked successfully!\n\n"
        f"Travel Plan: {result.plan.title}\n"
        f"Plan ID: {result.plan.id}\n"
        f"Status: {result.plan.status}\n"
        f"Total Cost: ${result.total_cost:g}\n"
        f"Booking Date: {format_timestamp(result.booking_date)}"
        + flights
        + hotels
        + f"\n\n📧 Confirmation emails will be sent to {contact_email}\n"
        + calendar
        + "🎯 Your complete trip is now confirmed!"
    )


class TravelPlanTools:
    """Tool handlers for creating, reading and booking travel plans."""

    def __init__(self, bookings: BookingService):
        self.bookings = bookings

    def register(self, server):
        server.register_tool(
            self.create_travel_plan,
            description="Create a new travel plan with destinations, dates, travelers, and budget",
            args_model=CreateTravelPlanArgs,
        )
        server.register_tool(
            self.get_travel_plan,
            description="Retrieve details of an existing travel plan",
            args_model=GetTravelPlanArgs,
        )
        server.register_tool(
            self.book_trip,
            description="Book a complete trip with flights and hotels for a travel plan",
            args_model=BookTripArgs,
        )

    async def create_travel_plan(
        self,
        title: str,
        destinations: List[str],
        start_date: str,
        end_date: str,
        travelers: int = 1,
        budget: Optional[float] = None,
    ) -> str:
        try:
            plan = await self.bookings.create_travel_plan(title, destinations, start_date, end_date, travelers, budget)
        except Exception as e:
            logger.error(f"Travel plan creation failed: {e}")
            return f"❌ Failed to create travel plan: {error_message(e)}"
        return format_new_plan(plan)

    async def get_travel_plan(self, plan_id: str) -> str:
        try:
            plan = await self.bookings.get_travel_plan(plan_id)
        except Exception as e:
            logger.error(f"Travel plan lookup failed: {e}")
            return f"❌ Failed to retrieve travel plan: {error_message(e)}"
        if plan is None:
            return f"❌ Travel plan not found with ID: {plan_id}"
        return format_plan(plan)

    async def book_trip(
        self,
        plan_id: str,
        flight_bookings: List[TripFlight],
        hotel_bookings: List[TripHotel],
        contact_info: ContactInfo,
    ) -> str:
        flights = [
            FlightBookingRequest(flight_id=fb.flight_id, passengers=fb.passengers, contact_info=contact_info)
            for fb in flight_bookings
        ]
        hotels = [
            HotelBookingRequest(
                hotel_id=hb.hotel_id,
                check_in=hb.check_in,
                check_out=hb.check_out,
                rooms=hb.rooms,
                guests=hb.guests,
                guest_info=hb.guest_info,
                contact_info=contact_info,
            )
            for hb in hotel_bookings
        ]
        try:
            result = await self.bookings.book_trip(plan_id, flights, hotels)
        except Exception as e:
            logger.error(f"Trip booking failed: {e}")
            return (
                f"❌ Trip booking failed: {error_message(e)}\n\n"
                "Some bookings may have been partially completed. Please check individual confirmations."
            )
        return format_trip(result, contact_info.email)
