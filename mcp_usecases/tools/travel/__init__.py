"""Travel planner tools: flights, hotels, calendar conflicts and travel plans."""

from ...agent.cache import global_tool_cache
from ...config import Config
from .booking import BookingService
from .calendar import CalendarService, CalendarTools
from .flights import FlightService, FlightTools
from .hotels import HotelService, HotelTools
from .plans import TravelPlanTools


def register_travel_tools(server, calendar_token: str = None):
    """Wire the travel services from Config and register their tools on ``server``."""
    calendar = CalendarService(calendar_token or Config.GOOGLE_ACCESS_TOKEN)
    bookings = BookingService(calendar=calendar)
    flights = FlightService(Config.AVIATIONSTACK_API_KEY, cache=global_tool_cache)
    hotels = HotelService(Config.RAPIDAPI_KEY, cache=global_tool_cache)

    FlightTools(flights, bookings).register(server)
    HotelTools(hotels, bookings).register(server)
    CalendarTools(calendar).register(server)
    TravelPlanTools(bookings).register(server)
    return server


__all__ = [
    "BookingService",
    "CalendarService",
    "FlightService",
    "HotelService",
    "register_travel_tools",
]
