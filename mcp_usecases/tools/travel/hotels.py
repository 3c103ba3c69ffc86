import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from ...agent.cache import ToolCache
from ...config import Config
from ..common import epoch_ms, error_message, format_timestamp, parse_datetime
from .models import (
    BookHotelArgs,
    BookingConfirmation,
    CalendarEvent,
    ContactInfo,
    Coordinates,
    GuestInfo,
    HotelBookingRequest,
    HotelDetailsArgs,
    HotelResult,
    HotelSearchArgs,
)

logger = logging.getLogger(__name__)

DEFAULT_REGION_ID = "6054439"  # New York

_MOCK_HOTELS = [
    {
        "key": 1,
        "name": "Grand Plaza Hotel",
        "address": "123 Main Street",
        "rating": 4.2,
        "price": 180,
        "amenities": ["Free WiFi", "Pool", "Gym", "Restaurant", "Room Service"],
        "description": "A luxurious hotel in the heart of the city with modern amenities and excellent service.",
        "coordinates": (40.7128, -74.006),
        "booking_url": "https://www.hotels.com/ho123456",
    },
    {
        "key": 2,
        "name": "City Center Inn",
        "address": "456 Business District",
        "rating": 3.8,
        "price": 120,
        "amenities": ["Free WiFi", "Business Center", "Parking", "Continental Breakfast"],
        "description": "Comfortable accommodations perfect for business travelers and tourists alike.",
        "coordinates": (40.7589, -73.9851),
        "booking_url": "https://www.hotels.com/ho789012",
    },
    {
        "key": 3,
        "name": "Boutique Suites",
        "address": "789 Trendy Avenue",
        "rating": 4.6,
        "price": 250,
        "amenities": ["Free WiFi", "Spa", "Rooftop Bar", "Concierge", "Pet Friendly"],
        "description": "Stylish boutique hotel with personalized service and unique design elements.",
        "coordinates": (40.7505, -73.9934),
        "booking_url": "https://www.hotels.com/ho345678",
    },
]


def count_nights(check_in: str, check_out: str) -> int:
    """Nights between two dates, rounding partial days up."""
    start = parse_datetime(check_in)
    end = parse_datetime(check_out)
    if start is None or end is None:
        return 0
    return math.ceil((end - start).total_seconds() / 86400)


def apply_filters(
    hotels: List[HotelResult], min_rating: Optional[float] = None, max_price: Optional[float] = None
) -> List[HotelResult]:
    results = hotels
    if min_rating is not None:
        results = [h for h in results if h.rating is not None and h.rating >= min_rating]
    if max_price is not None:
        results = [h for h in results if h.price_per_night is not None and h.price_per_night <= max_price]
    return results


class HotelService:
    """Hotel search and details through the Hotels.com provider on RapidAPI."""

    BASE_URL = "https://hotels-com-provider.p.rapidapi.com"
    HOST = "hotels-com-provider.p.rapidapi.com"

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache: Optional[ToolCache] = None,
    ):
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport
        if cache is not None:
            self._lookup_region = cache.cached(self._lookup_region)
            self._search = cache.cached(self._search)

    @property
    def headers(self) -> Dict[str, str]:
        return {"X-RapidAPI-Key": self.api_key or "", "X-RapidAPI-Host": self.HOST}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self.timeout, headers=self.headers)

    async def search_hotels(
        self,
        destination: str,
        check_in: str,
        check_out: str,
        guests: int = 1,
        rooms: int = 1,
        min_rating: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[HotelResult]:
        """Search hotels, then filter locally by rating and nightly price.

        The provider has no rating or price filters of its own, so the same
        filters also apply to the mock hotels used when it is unavailable.
        """
        nights = count_nights(check_in, check_out)
        if not self.api_key:
            logger.warning("RAPIDAPI_KEY not set, returning mock hotels")
            hotels = self.mock_hotels(destination, nights)
        else:
            try:
                region_id = await self.get_region_id(destination)
                hotels = await self._search(region_id, check_in, check_out, guests, rooms, nights)
            except Exception as e:
                logger.error(f"Error searching hotels: {error_message(e)}")
                hotels = self.mock_hotels(destination, nights)
        return apply_filters(hotels, min_rating, max_price)

    async def _search(
        self, region_id: str, check_in: str, check_out: str, guests: int, rooms: int, nights: int
    ) -> List[HotelResult]:
        params = {
            "domain": "US",
            "sort_order": "REVIEW",
            "locale": "en_US",
            "checkout_date": check_out,
            "checkin_date": check_in,
            "adults_number": guests,
            "room_number": rooms,
            "region_id": region_id,
        }
        async with self._client() as client:
            response = await client.get(f"{self.BASE_URL}/v2/hotels/search", params=params)
            response.raise_for_status()
            data = response.json()

        hotels = ((data.get("data") or {}).get("hotels")) or []
        return [self._to_hotel_result(index, hotel, nights) for index, hotel in enumerate(hotels)]

    async def get_region_id(self, destination: str) -> str:
        try:
            region_id = await self._lookup_region(destination)
        except Exception as e:
            logger.error(f"Error getting region ID: {error_message(e)}")
            return DEFAULT_REGION_ID
        return region_id or DEFAULT_REGION_ID

    async def _lookup_region(self, destination: str) -> Optional[str]:
        params = {"domain": "US", "locale": "en_US", "name": destination}
        async with self._client() as client:
            response = await client.get(f"{self.BASE_URL}/v1/hotels/locations", params=params)
            response.raise_for_status()
            regions = response.json().get("data") or []
        if regions and regions[0].get("gaiaId"):
            return str(regions[0]["gaiaId"])
        return None

    @staticmethod
    def _to_hotel_result(index: int, hotel: Dict[str, Any], nights: int) -> HotelResult:
        hotel_id = hotel.get("id") or f"hotel_{index}_{epoch_ms()}"
        price = hotel.get("price") or {}
        amount = price.get("amount")
        coords = hotel.get("coordinates")
        return HotelResult(
            id=str(hotel_id),
            name=hotel.get("name"),
            address=hotel.get("address"),
            city=hotel.get("city"),
            country=hotel.get("country"),
            rating=hotel.get("rating"),
            price_per_night=amount,
            currency=price.get("currency"),
            total_price=amount * nights if amount is not None else None,
            amenities=hotel.get("amenities") or [],
            images=hotel.get("images") or [],
            description=hotel.get("description"),
            coordinates=Coordinates(latitude=coords["lat"], longitude=coords["lng"]) if coords else None,
            booking_url=f"https://www.hotels.com/ho{hotel_id}",
        )

    @staticmethod
    def mock_hotels(destination: str, nights: int) -> List[HotelResult]:
        stamp = epoch_ms()
        return [
            HotelResult(
                id=f"mock_hotel_{mock['key']}_{stamp}",
                name=mock["name"],
                address=mock["address"],
                city=destination,
                country="United States",
                rating=mock["rating"],
                price_per_night=mock["price"],
                currency="USD",
                total_price=mock["price"] * nights,
                amenities=list(mock["amenities"]),
                images=[f"https://example.com/hotel{mock['key']}-1.jpg", f"https://example.com/hotel{mock['key']}-2.jpg"],
                description=mock["description"],
                coordinates=Coordinates(latitude=mock["coordinates"][0], longitude=mock["coordinates"][1]),
                booking_url=mock["booking_url"],
            )
            for mock in _MOCK_HOTELS
        ]

    async def get_hotel_details(self, hotel_id: str) -> Optional[HotelResult]:
        if not self.api_key:
            logger.warning("RAPIDAPI_KEY not set, hotel details unavailable")
            return None

        params = {"domain": "US", "locale": "en_US", "hotel_id": hotel_id}
        try:
            async with self._client() as client:
                response = await client.get(f"{self.BASE_URL}/v2/hotels/details", params=params)
                response.raise_for_status()
                data = response.json().get("data") or {}
        except Exception as e:
            logger.error(f"Error getting hotel details: {error_message(e)}")
            return None

        address = data.get("address") or {}
        price = ((data.get("ratePlan") or {}).get("price")) or {}
        coords = data.get("coordinate")
        return HotelResult(
            id=str(data.get("id") or hotel_id),
            name=data.get("name"),
            address=address.get("line1") or "",
            city=address.get("city") or "",
            country=address.get("country") or "",
            rating=(data.get("reviews") or {}).get("score") or 0,
            price_per_night=price.get("current") or 0,
            currency=price.get("currency") or "USD",
            total_price=price.get("current") or 0,
            amenities=[a.get("name") for a in data.get("amenities") or [] if a.get("name")],
            images=[img.get("url") for img in data.get("images") or [] if img.get("url")],
            description=data.get("summary") or "",
            coordinates=Coordinates(latitude=coords["lat"], longitude=coords["lon"]) if coords else None,
            booking_url=f"https://www.hotels.com/ho{data.get('id') or hotel_id}",
        )


def format_hotel(hotel: HotelResult) -> str:
    currency = hotel.currency or "USD"
    location = ", ".join(part for part in (hotel.address, hotel.city) if part) or "Unknown"
    return (
        f"{hotel.name or 'Unnamed hotel'} ({hotel.rating if hotel.rating is not None else 'N/A'}⭐)\n"
        f"ID: {hotel.id or 'N/A'}\n"
        f"Location: {location}\n"
        f"Price: {currency} {hotel.price_per_night if hotel.price_per_night is not None else 'N/A'}/night"
        f" (Total: {currency} {hotel.total_price if hotel.total_price is not None else 'N/A'})\n"
        f"Amenities: {', '.join(hotel.amenities[:5]) or 'None listed'}\n"
    )


def format_hotel_details(hotel: HotelResult) -> str:
    lines = [format_hotel(hotel).rstrip("\n")]
    if hotel.country:
        lines.append(f"Country: {hotel.country}")
    if hotel.description:
        lines.append(f"About: {hotel.description}")
    if hotel.coordinates:
        lines.append(f"Coordinates: {hotel.coordinates.latitude}, {hotel.coordinates.longitude}")
    if hotel.booking_url:
        lines.append(f"Book: {hotel.booking_url}")
    return "\n".join(lines)


def format_hotel_booking(
    confirmation: BookingConfirmation,
    check_in: str,
    check_out: str,
    rooms: int,
    guests: int,
    contact_email: str,
    calendar_event: Optional[CalendarEvent] = None,
) -> str:
    calendar = "\n📅 Hotel stay has been added to your calendar" if calendar_event else ""
    return (
        "✅ Hotel booked successfully!\n\n"
        f"Booking ID: {confirmation.booking_id}\n"
        f"Confirmation Number: {confirmation.confirmation_number}\n"
        f"Status: {confirmation.status}\n"
        f"Check-in: {check_in}\n"
        f"Check-out: {check_out}\n"
        f"Duration: {count_nights(check_in, check_out)} nights\n"
        f"Rooms: {rooms}\n"
        f"Guests: {guests}\n"
        f"Total Price: {confirmation.currency} {confirmation.total_price}\n"
        f"Booking Date: {format_timestamp(confirmation.booking_date)}\n\n"
        f"📧 Confirmation email will be sent to {contact_email}"
        f"{calendar}"
    )


class HotelTools:
    """Tool handlers for hotel search, details and booking."""

    def __init__(self, hotels: HotelService, bookings):
        self.hotels = hotels
        self.bookings = bookings

    def register(self, server):
        server.register_tool(
            self.search_hotels,
            description="Search for hotels by destination, dates, guests, and rating/price filters",
            args_model=HotelSearchArgs,
        )
        server.register_tool(
            self.get_hotel_details,
            description="Get detailed information about a hotel from search results",
            args_model=HotelDetailsArgs,
        )
        server.register_tool(
            self.book_hotel,
            description="Book a hotel with guest information and contact details",
            args_model=BookHotelArgs,
        )

    async def search_hotels(
        self,
        destination: str,
        check_in: str,
        check_out: str,
        guests: int = 1,
        rooms: int = 1,
        min_rating: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> str:
        try:
            hotels = await self.hotels.search_hotels(
                destination, check_in, check_out, guests, rooms, min_rating, max_price
            )
        except Exception as e:
            logger.error(f"Hotel search failed: {e}")
            return f"❌ Error searching hotels: {error_message(e)}"

        if not hotels:
            return f"No hotels found in {destination} matching your criteria."
        summary = "\n---\n".join(format_hotel(hotel) for hotel in hotels)
        return f"Found {len(hotels)} hotels in {destination}:\n\n{summary}"

    async def get_hotel_details(self, hotel_id: str) -> str:
        try:
            hotel = await self.hotels.get_hotel_details(hotel_id)
        except Exception as e:
            logger.error(f"Hotel details lookup failed: {e}")
            return f"❌ Error getting hotel details: {error_message(e)}"
        if hotel is None:
            return f"❌ Hotel details not available for ID: {hotel_id}"
        return format_hotel_details(hotel)

    async def book_hotel(
        self,
        hotel_id: str,
        check_in: str,
        check_out: str,
        rooms: int,
        guests: int,
        guest_info: List[GuestInfo],
        contact_info: ContactInfo,
    ) -> str:
        try:
            request = HotelBookingRequest(
                hotel_id=hotel_id,
                check_in=check_in,
                check_out=check_out,
                rooms=rooms,
                guests=guests,
                guest_info=guest_info,
                contact_info=contact_info,
            )
            confirmation = await self.bookings.book_hotel(request)
            event = await self.bookings.add_to_calendar(confirmation)
        except Exception as e:
            logger.error(f"Hotel booking failed: {e}")
            return f"❌ Hotel booking failed: {error_message(e)}\n\nPlease check your information and try again."
        return format_hotel_booking(confirmation, check_in, check_out, rooms, guests, contact_info.email, event)
