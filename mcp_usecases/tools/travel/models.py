"""Data models for the travel planner: tool arguments, provider results and bookings."""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

FlightClass = Literal["economy", "business", "first"]
BookingStatus = Literal["confirmed", "pending", "failed"]
PlanStatus = Literal["planning", "booked", "completed", "cancelled"]


# Flights

class FlightSearchArgs(BaseModel):
    origin: str = Field(..., min_length=1, description="Origin airport code (e.g., JFK, LAX)")
    destination: str = Field(..., min_length=1, description="Destination airport code (e.g., LHR, CDG)")
    departure_date: str = Field(..., description="Departure date in YYYY-MM-DD format")
    return_date: Optional[str] = Field(None, description="Return date in YYYY-MM-DD format (optional)")
    passengers: int = Field(1, ge=1, description="Number of passengers")
    flight_class: FlightClass = Field("economy", description="Flight class")


class FlightInfo(BaseModel):
    id: Optional[str] = None
    airline: Optional[str] = None
    flight_number: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    duration: Optional[str] = None
    price: Optional[float] = None
    currency: Optional[str] = None
    booking_url: Optional[str] = None
    aircraft: Optional[str] = None
    stops: Optional[int] = None


class FlightStatusArgs(BaseModel):
    flight_number: str = Field(..., min_length=1, description="Flight IATA number (e.g., AA1234)")
    date: str = Field(..., description="Flight date in YYYY-MM-DD format")


# Hotels

class HotelSearchArgs(BaseModel):
    destination: str = Field(..., min_length=1, description="Destination city or location")
    check_in: str = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out: str = Field(..., description="Check-out date in YYYY-MM-DD format")
    guests: int = Field(1, ge=1, description="Number of guests")
    rooms: int = Field(1, ge=1, description="Number of rooms")
    min_rating: Optional[float] = Field(None, ge=1, le=5, description="Minimum hotel rating (1-5)")
    max_price: Optional[float] = Field(None, gt=0, description="Maximum price per night")


class Coordinates(BaseModel):
    latitude: float
    longitude: float


class HotelResult(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    rating: Optional[float] = None
    price_per_night: Optional[float] = None
    currency: Optional[str] = None
    total_price: Optional[float] = None
    amenities: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    booking_url: Optional[str] = None
    description: Optional[str] = None
    coordinates: Optional[Coordinates] = None


class HotelDetailsArgs(BaseModel):
    hotel_id: str = Field(..., min_length=1, description="Hotel ID from search results")


# Calendar

class EventTime(BaseModel):
    date_time: Optional[str] = None
    date: Optional[str] = None
    time_zone: Optional[str] = None

    def to_api(self) -> dict:
        payload = {"dateTime": self.date_time, "date": self.date, "timeZone": self.time_zone}
        return {k: v for k, v in payload.items() if v is not None}

    @classmethod
    def from_api(cls, data: Optional[dict]) -> "EventTime":
        data = data or {}
        return cls(date_time=data.get("dateTime"), date=data.get("date"), time_zone=data.get("timeZone"))


class CalendarEvent(BaseModel):
    id: Optional[str] = None
    summary: str = "No title"
    description: Optional[str] = None
    start: EventTime = Field(default_factory=EventTime)
    end: EventTime = Field(default_factory=EventTime)
    location: Optional[str] = None


class Conflict(BaseModel):
    type: Literal["overlap", "tight_schedule", "travel_time"]
    event_id: Optional[str] = None
    event_title: str
    conflict_time: str
    severity: Literal["low", "medium", "high"]
    suggestion: Optional[str] = None


class CalendarConflictArgs(BaseModel):
    start_date: str = Field(..., description="Travel start date in YYYY-MM-DD format")
    end_date: str = Field(..., description="Travel end date in YYYY-MM-DD format")


# Bookings

class PassengerInfo(BaseModel):
    first_name: str = Field(..., min_length=1, description="Passenger first name")
    last_name: str = Field(..., min_length=1, description="Passenger last name")
    date_of_birth: str = Field(..., description="Date of birth in YYYY-MM-DD format")
    passport_number: Optional[str] = Field(None, description="Passport number (optional)")
    nationality: Optional[str] = Field(None, description="Nationality (optional)")


class GuestInfo(BaseModel):
    first_name: str = Field(..., min_length=1, description="Guest first name")
    last_name: str = Field(..., min_length=1, description="Guest last name")
    email: Optional[str] = Field(None, description="Guest email (optional)")


class ContactInfo(BaseModel):
    email: str = Field(..., min_length=3, description="Contact email")
    phone: str = Field(..., min_length=1, description="Contact phone number")
    first_name: str = Field(..., min_length=1, description="Contact first name")
    last_name: str = Field(..., min_length=1, description="Contact last name")


class FlightBookingRequest(BaseModel):
    flight_id: str
    passengers: List[PassengerInfo]
    contact_info: ContactInfo
    flight: Optional[FlightInfo] = None


class HotelBookingRequest(BaseModel):
    hotel_id: str
    check_in: str
    check_out: str
    rooms: int
    guests: int
    guest_info: List[GuestInfo]
    contact_info: ContactInfo
    hotel: Optional[HotelResult] = None


class FlightBookingDetails(BaseModel):
    type: Literal["flight"] = "flight"
    flight_id: Optional[str] = None
    flight: Optional[FlightInfo] = None
    passengers: List[PassengerInfo] = Field(default_factory=list)
    seat_assignments: List[str] = Field(default_factory=list)


class HotelBookingDetails(BaseModel):
    type: Literal["hotel"] = "hotel"
    hotel_id: Optional[str] = None
    hotel: Optional[HotelResult] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    rooms: Optional[int] = None
    guests: List[GuestInfo] = Field(default_factory=list)


class BookingConfirmation(BaseModel):
    booking_id: str
    confirmation_number: str
    status: BookingStatus = "confirmed"
    total_price: float = 0
    currency: str = "USD"
    booking_date: str
    details: Union[FlightBookingDetails, HotelBookingDetails] = Field(..., discriminator="type")


class BookFlightArgs(BaseModel):
    flight_id: str = Field(..., min_length=1, description="Flight ID from search results")
    passengers: List[PassengerInfo] = Field(..., min_length=1, description="List of passengers")
    contact_info: ContactInfo = Field(..., description="Contact information")


class BookHotelArgs(BaseModel):
    hotel_id: str = Field(..., min_length=1, description="Hotel ID from search results")
    check_in: str = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out: str = Field(..., description="Check-out date in YYYY-MM-DD format")
    rooms: int = Field(..., ge=1, description="Number of rooms")
    guests: int = Field(..., ge=1, description="Number of guests")
    guest_info: List[GuestInfo] = Field(..., min_length=1, description="List of guests")
    contact_info: ContactInfo = Field(..., description="Contact information")


# Travel plans

class TravelPlan(BaseModel):
    id: str
    title: str
    destinations: List[str] = Field(default_factory=list)
    start_date: str
    end_date: str
    travelers: int = 1
    budget: Optional[float] = None
    status: PlanStatus = "planning"
    flights: List[BookingConfirmation] = Field(default_factory=list)
    hotels: List[BookingConfirmation] = Field(default_factory=list)
    created_at: str
    updated_at: str


class CreateTravelPlanArgs(BaseModel):
    title: str = Field(..., min_length=1, description="Title for the travel plan")
    destinations: List[str] = Field(..., min_length=1, description="List of destinations")
    start_date: str = Field(..., description="Travel start date in YYYY-MM-DD format")
    end_date: str = Field(..., description="Travel end date in YYYY-MM-DD format")
    travelers: int = Field(1, ge=1, description="Number of travelers")
    budget: Optional[float] = Field(None, ge=0, description="Budget for the trip")


class GetTravelPlanArgs(BaseModel):
    plan_id: str = Field(..., min_length=1, description="Travel plan ID")


class TripFlight(BaseModel):
    flight_id: str = Field(..., min_length=1, description="Flight ID from search results")
    passengers: List[PassengerInfo] = Field(..., min_length=1, description="List of passengers")


class TripHotel(BaseModel):
    hotel_id: str = Field(..., min_length=1, description="Hotel ID from search results")
    check_in: str = Field(..., description="Check-in date in YYYY-MM-DD format")
    check_out: str = Field(..., description="Check-out date in YYYY-MM-DD format")
    rooms: int = Field(..., ge=1, description="Number of rooms")
    guests: int = Field(..., ge=1, description="Number of guests")
    guest_info: List[GuestInfo] = Field(..., min_length=1, description="List of guests")


class BookTripArgs(BaseModel):
    plan_id: str = Field(..., min_length=1, description="Travel plan ID")
    flight_bookings: List[TripFlight] = Field(default_factory=list, description="Flight bookings to make")
    hotel_bookings: List[TripHotel] = Field(default_factory=list, description="Hotel bookings to make")
    contact_info: ContactInfo = Field(..., description="Contact information for all bookings")


class TripBookingResult(BaseModel):
    plan: TravelPlan
    flight_confirmations: List[BookingConfirmation] = Field(default_factory=list)
    hotel_confirmations: List[BookingConfirmation] = Field(default_factory=list)
    total_cost: float = 0
    booking_date: str
    calendar_events: List[CalendarEvent] = Field(default_factory=list)
