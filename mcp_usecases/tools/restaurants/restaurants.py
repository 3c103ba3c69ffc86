import logging
from typing import Any, Dict, List, Optional

import httpx

from ...agent.cache import ToolCache
from ...config import Config
from ...errors import ConfigurationError, ProviderError
from ..common import error_message
from .models import Restaurant, RestaurantDetailsArgs, RestaurantSearchArgs

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "San Francisco, CA"

# Common cuisine names mapped to Yelp category aliases
CUISINE_CATEGORIES = {
    "italian": "italian",
    "japanese": "japanese",
    "french": "french",
    "indian": "indpak",
    "chinese": "chinese",
    "mexican": "mexican",
    "american": "newamerican",
    "thai": "thai",
    "mediterranean": "mediterranean",
}


def to_restaurant(business: Dict[str, Any]) -> Restaurant:
    """Map a Yelp business onto a Restaurant."""
    categories = business.get("categories") or []
    cuisine = categories[0].get("title") if categories else None
    cuisine = cuisine or "Restaurant"
    price = business.get("price")
    address = (business.get("location") or {}).get("display_address") or []
    return Restaurant(
        id=business.get("id"),
        name=business.get("name"),
        cuisine=cuisine,
        location=", ".join(address),
        rating=business.get("rating"),
        price_level=len(price) if price else 2,
        phone=business.get("display_phone") or None,
        website=business.get("url"),
        image_url=business.get("image_url"),
        description=f"{cuisine} restaurant with {business.get('review_count', 0)} reviews",
    )


def _price_signs(restaurant: Restaurant) -> str:
    return "$" * (restaurant.price_level or 0) or "N/A"


def format_restaurant(restaurant: Restaurant) -> str:
    return (
        f"🍽️ {restaurant.name or 'Unnamed restaurant'}\n\n"
        f"Id: {restaurant.id or 'N/A'}\n"
        f"Cuisine: {restaurant.cuisine or 'Unknown'}\n"
        f"Location: {restaurant.location or 'Unknown'}\n"
        f"Rating: {restaurant.rating if restaurant.rating is not None else 'N/A'}/5 ⭐\n"
        f"Price: {_price_signs(restaurant)}\n"
        f"{restaurant.description or ''}"
    )


def format_restaurant_details(restaurant: Restaurant) -> str:
    return (
        f"🍽️ {restaurant.name or 'Unnamed restaurant'}\n\n"
        f"🆔 Id: {restaurant.id or 'N/A'}\n"
        f"🍴 Cuisine: {restaurant.cuisine or 'Unknown'}\n"
        f"📍 Location: {restaurant.location or 'Unknown'}\n"
        f"⭐ Rating: {restaurant.rating if restaurant.rating is not None else 'N/A'}/5\n"
        f"💰 Price Level: {_price_signs(restaurant)}\n"
        f"📞 Phone: {restaurant.phone or 'Not available'}\n"
        f"🌐 Website: {restaurant.website or 'Not available'}\n\n"
        f"📝 Description: {restaurant.description or 'No description available'}"
    )


class RestaurantService:
    """Restaurant discovery through the Yelp Fusion API."""

    BASE_URL = "https://api.yelp.com/v3"

    def __init__(
        self,
        api_key: Optional[str],
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[ToolCache] = None,
    ):
        if not api_key:
            raise ConfigurationError("YELP_API_KEY environment variable is required")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        if cache is not None:
            self.fetch_restaurant = cache.cached(self.fetch_restaurant)

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout, headers=headers) as client:
            response = await client.get(f"{self.BASE_URL}{endpoint}", params=params)
            response.raise_for_status()
            return response.json()

    @staticmethod
    def search_params(
        location: Optional[str] = None,
        cuisine: Optional[str] = None,
        price_level: Optional[int] = None,
    ) -> Dict[str, str]:
        params = {
            "categories": "restaurants",
            "limit": "20",
            "sort_by": "best_match",
            "location": location or DEFAULT_LOCATION,
        }
        if cuisine:
            params["categories"] = CUISINE_CATEGORIES.get(cuisine.lower(), cuisine.lower())
        if price_level:
            params["price"] = ",".join(str(level) for level in range(1, price_level + 1))
        return params

    async def search_restaurants(
        self,
        location: Optional[str] = None,
        cuisine: Optional[str] = None,
        price_level: Optional[int] = None,
        min_rating: Optional[float] = None,
    ) -> List[Restaurant]:
        """Search Yelp and filter by minimum rating locally.

        Failures raise ProviderError; there is no mock data for restaurants.
        """
        try:
            data = await self._get("/businesses/search", self.search_params(location, cuisine, price_level))
        except Exception as e:
            logger.error(f"Error searching restaurants: {error_message(e)}")
            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            raise ProviderError("yelp", f"Failed to search restaurants: {error_message(e)}", status) from e

        restaurants = [to_restaurant(business) for business in data.get("businesses") or []]
        if min_rating:
            restaurants = [r for r in restaurants if r.rating is not None and r.rating >= min_rating]
        return restaurants

    async def fetch_restaurant(self, restaurant_id: str) -> Restaurant:
        return to_restaurant(await self._get(f"/businesses/{restaurant_id}"))

    async def get_restaurant_by_id(self, restaurant_id: str) -> Optional[Restaurant]:
        try:
            return await self.fetch_restaurant(restaurant_id)
        except Exception as e:
            logger.error(f"Error getting restaurant {restaurant_id}: {error_message(e)}")
            return None

    async def get_all_restaurants(self, location: str = DEFAULT_LOCATION) -> List[Restaurant]:
        return await self.search_restaurants(location=location)


class RestaurantTools:
    def __init__(self, restaurants: RestaurantService):
        self.restaurants = restaurants

    def register(self, server):
        server.register_tool(
            self.search_restaurants,
            description="Search for restaurants with optional filters for location, cuisine, price level, and rating",
            args_model=RestaurantSearchArgs,
        )
        server.register_tool(
            self.get_restaurant_details,
            description="Get detailed information about a specific restaurant by ID",
            args_model=RestaurantDetailsArgs,
        )

    async def search_restaurants(
        self,
        location: Optional[str] = None,
        cuisine: Optional[str] = None,
        price_level: Optional[int] = None,
        min_rating: Optional[float] = None,
    ) -> str:
        try:
            restaurants = await self.restaurants.search_restaurants(location, cuisine, price_level, min_rating)
        except Exception as e:
            logger.error(f"Restaurant search failed: {e}")
            return f"❌ Error searching restaurants: {error_message(e)}"

        if not restaurants:
            return "🔍 No restaurants found matching your criteria. Try adjusting your filters."
        results = "\n\n".join(format_restaurant(r) for r in restaurants)
        return f"Found {len(restaurants)} restaurants:\n\n{results}"

    async def get_restaurant_details(self, restaurant_id: str) -> str:
        try:
            restaurant = await self.restaurants.get_restaurant_by_id(restaurant_id)
        except Exception as e:
            logger.error(f"Restaurant lookup failed: {e}")
            return f"❌ Error fetching restaurant details: {error_message(e)}"
        if restaurant is None:
            return "❌ Restaurant not found. Please check the restaurant ID."
        return format_restaurant_details(restaurant)
