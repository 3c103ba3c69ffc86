from .meetings import register_meeting_tools
from .restaurants import register_restaurant_tools
from .travel import register_travel_tools

__all__ = ["register_meeting_tools", "register_restaurant_tools", "register_travel_tools"]
