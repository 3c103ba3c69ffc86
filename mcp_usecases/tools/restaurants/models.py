from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ReservationStatus = Literal["confirmed", "pending", "cancelled"]


class Restaurant(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    cuisine: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[float] = None
    price_level: Optional[int] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    image_url: Optional[str] = None
    description: Optional[str] = None


class Reservation(BaseModel):
    id: str
    restaurant_id: str
    restaurant_name: str = ""
    date: str
    time: str
    party_size: int
    customer_name: str
    customer_email: str
    customer_phone: str
    status: ReservationStatus = "confirmed"
    special_requests: Optional[str] = None


class Availability(BaseModel):
    is_available: bool
    alternative_times: List[str]
    message: str


class RestaurantSearchArgs(BaseModel):
    location: Optional[str] = Field(None, description='Filter by location (e.g., "Downtown", "Midtown")')
    cuisine: Optional[str] = Field(None, description='Filter by cuisine type (e.g., "Italian", "Japanese", "French")')
    price_level: Optional[int] = Field(None, ge=1, le=4, description="Maximum price level (1-4, where 1 is cheapest)")
    min_rating: Optional[float] = Field(None, ge=1, le=5, description="Minimum rating (1-5 stars)")


class RestaurantDetailsArgs(BaseModel):
    restaurant_id: str = Field(..., min_length=1, description="The unique ID of the restaurant")


class AvailabilityArgs(BaseModel):
    restaurant_id: str = Field(..., min_length=1, description="The unique ID of the restaurant")
    date: str = Field(..., min_length=1, description='Reservation date (e.g., "2024-08-15")')
    time: str = Field(..., min_length=1, description='Preferred time (e.g., "7:00 PM")')
    party_size: int = Field(..., ge=1, le=20, description="Number of people in the party")


class MakeReservationArgs(BaseModel):
    restaurant_id: str = Field(..., min_length=1, description="The unique ID of the restaurant")
    date: str = Field(..., min_length=1, description='Reservation date (e.g., "2024-08-15")')
    time: str = Field(..., min_length=1, description='Reservation time (e.g., "7:00 PM")')
    party_size: int = Field(..., ge=1, le=20, description="Number of people in the party")
    customer_name: str = Field(..., min_length=1, description="Customer full name")
    customer_email: str = Field(..., min_length=3, description="Customer email address")
    customer_phone: str = Field(..., min_length=1, description="Customer phone number")
    special_requests: Optional[str] = Field(None, description="Any special requests or dietary restrictions")


class ViewReservationsArgs(BaseModel):
    customer_email: str = Field(..., min_length=3, description="Customer email address to look up reservations")


class CancelReservationArgs(BaseModel):
    reservation_id: str = Field(..., min_length=1, description="The reservation confirmation ID")
    customer_email: str = Field(..., min_length=3, description="Customer email address for verification")
