"""Restaurant reservation tools backed by Yelp Fusion and a reservation store."""

from ...agent.cache import global_tool_cache
from ...config import Config
from .reservations import InMemoryReservationStore, ReservationService, ReservationStore, ReservationTools
from .restaurants import RestaurantService, RestaurantTools


def register_restaurant_tools(server, store: ReservationStore = None):
    """Register restaurant and reservation tools. Raises ConfigurationError without YELP_API_KEY."""
    restaurants = RestaurantService(Config.YELP_API_KEY, cache=global_tool_cache)
    reservations = ReservationService(store or InMemoryReservationStore())

    RestaurantTools(restaurants).register(server)
    ReservationTools(reservations, restaurants).register(server)
    return server


__all__ = [
    "InMemoryReservationStore",
    "ReservationService",
    "ReservationStore",
    "RestaurantService",
    "register_restaurant_tools",
]
