import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ...errors import ReservationAlreadyCancelledError, ReservationNotFoundError
from ..common import epoch_ms, error_message, random_token
from .models import (
    Availability,
    AvailabilityArgs,
    CancelReservationArgs,
    MakeReservationArgs,
    Reservation,
    ViewReservationsArgs,
)
from .restaurants import RestaurantService

logger = logging.getLogger(__name__)

ALTERNATIVE_TIMES = ["6:00 PM", "6:30 PM", "7:00 PM", "7:30 PM", "8:00 PM"]
AVAILABILITY_THRESHOLD = 0.3


def _same_email(a: str, b: str) -> bool:
    return a.lower() == b.lower()


class ReservationStore(ABC):
    """
    Abstract storage for reservations.

    ReservationService only talks to this interface, so a database or KV
    backed store can replace the in-memory one. Implementations hand out
    copies: changing a returned Reservation never changes the stored one.
    """

    @abstractmethod
    async def add(self, reservation: Reservation) -> Reservation:
        pass

    @abstractmethod
    async def get(self, reservation_id: str, customer_email: str) -> Optional[Reservation]:
        """Return the reservation only when both id and email (any case) match."""
        pass

    @abstractmethod
    async def find_by_email(self, customer_email: str) -> List[Reservation]:
        pass

    @abstractmethod
    async def cancel(self, reservation_id: str, customer_email: str) -> Reservation:
        """
        Move a reservation to ``cancelled``.

        Raises:
            ReservationNotFoundError: no reservation matches id and email.
            ReservationAlreadyCancelledError: it was cancelled before; the
                stored status is left as is.
        """
        pass


class InMemoryReservationStore(ReservationStore):
    """Process-local store: a dict keyed by reservation id, guarded by an asyncio.Lock."""

    def __init__(self):
        self._reservations: Dict[str, Reservation] = {}
        self._lock = asyncio.Lock()

    async def add(self, reservation: Reservation) -> Reservation:
        async with self._lock:
            if reservation.id in self._reservations:
                raise ValueError(f"Duplicate reservation id: {reservation.id}")
            self._reservations[reservation.id] = reservation.model_copy()
        return reservation.model_copy()

    async def get(self, reservation_id: str, customer_email: str) -> Optional[Reservation]:
        async with self._lock:
            reservation = self._reservations.get(reservation_id)
            if reservation is None or not _same_email(reservation.customer_email, customer_email):
                return None
            return reservation.model_copy()

    async def find_by_email(self, customer_email: str) -> List[Reservation]:
        async with self._lock:
            return [
                r.model_copy() for r in self._reservations.values()
                if _same_email(r.customer_email, customer_email)
            ]

    async def cancel(self, reservation_id: str, customer_email: str) -> Reservation:
        async with self._lock:
            reservation = self._reservations.get(reservation_id)
            if reservation is None or not _same_email(reservation.customer_email, customer_email):
                raise ReservationNotFoundError(
                    "Reservation not found or email doesn't match. "
                    "Please check your reservation ID and email address."
                )
            if reservation.status == "cancelled":
                raise ReservationAlreadyCancelledError(reservation_id)

            cancelled = reservation.model_copy(update={"status": "cancelled"})
            self._reservations[reservation_id] = cancelled
            return cancelled.model_copy()

    def __len__(self):
        return len(self._reservations)


class ReservationService:
    """Mock reservation desk: random availability, reservations kept in a ReservationStore."""

    def __init__(self, store: ReservationStore, rng: Optional[random.Random] = None):
        self.store = store
        self._rng = rng or random.Random()

    async def check_availability(self, restaurant_id: str, date: str, time: str, party_size: int) -> Availability:
        # Roughly 70% of requests find a table
        if self._rng.random() > AVAILABILITY_THRESHOLD:
            return Availability(
                is_available=True,
                alternative_times=list(ALTERNATIVE_TIMES),
                message=f"✅ Available at {time} for {party_size} people",
            )
        return Availability(
            is_available=False,
            alternative_times=list(ALTERNATIVE_TIMES),
            message=f"❌ Not available at {time}. Alternative times available: {', '.join(ALTERNATIVE_TIMES)}",
        )

    def new_reservation_id(self) -> str:
        return f"res_{epoch_ms()}_{random_token(9, self._rng)}"

    async def make_reservation(
        self,
        restaurant_id: str,
        date: str,
        time: str,
        party_size: int,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        special_requests: Optional[str] = None,
        restaurant_name: str = "",
    ) -> Reservation:
        reservation = Reservation(
            id=self.new_reservation_id(),
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_name,
            date=date,
            time=time,
            party_size=party_size,
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            status="confirmed",
            special_requests=special_requests,
        )
        stored = await self.store.add(reservation)
        logger.info(f"Created reservation {stored.id} at {restaurant_id}")
        return stored

    async def get_reservations_by_email(self, customer_email: str) -> List[Reservation]:
        return await self.store.find_by_email(customer_email)

    async def get_reservation_by_id_and_email(self, reservation_id: str, customer_email: str) -> Optional[Reservation]:
        return await self.store.get(reservation_id, customer_email)

    async def cancel_reservation(self, reservation_id: str, customer_email: str) -> Reservation:
        cancelled = await self.store.cancel(reservation_id, customer_email)
        logger.info(f"Cancelled reservation {reservation_id}")
        return cancelled


def format_reservation(reservation: Reservation) -> str:
    text = (
        f"🍽️ **{reservation.restaurant_name or 'Unknown Restaurant'}**\n"
        f"   📋 ID: {reservation.id}\n"
        f"   📅 Date: {reservation.date}\n"
        f"   🕐 Time: {reservation.time}\n"
        f"   👥 Party Size: {reservation.party_size}\n"
        f"   ✅ Status: {reservation.status}\n"
    )
    if reservation.special_requests:
        text += f"   📝 Special Requests: {reservation.special_requests}\n"
    return text


def format_reservation_confirmation(reservation: Reservation, restaurant_phone: Optional[str] = None) -> str:
    special = f"📝 Special Requests: {reservation.special_requests}\n" if reservation.special_requests else ""
    changes = f"Call {restaurant_phone} if you need to make changes." if restaurant_phone else ""
    return (
        "🎉 **Reservation Confirmed!**\n\n"
        f"📋 **IMPORTANT - YOUR RESERVATION ID: {reservation.id}**\n\n"
        f"🍽️ Restaurant: {reservation.restaurant_name}\n"
        f"📅 Date: {reservation.date}\n"
        f"🕐 Time: {reservation.time}\n"
        f"👥 Party Size: {reservation.party_size}\n"
        f"👤 Name: {reservation.customer_name}\n"
        f"📧 Email: {reservation.customer_email}\n"
        f"📞 Phone: {reservation.customer_phone}\n"
        f"{special}"
        f"\n✅ Status: {reservation.status}\n\n"
        f"Please arrive 15 minutes early. {changes}\n\n"
        "To view or cancel your reservation, use your reservation ID and email address."
    )


def format_cancellation(reservation: Reservation) -> str:
    return (
        "✅ **Reservation Cancelled**\n\n"
        f"📋 Confirmation #: {reservation.id}\n"
        f"🍽️ Restaurant: {reservation.restaurant_name or 'Unknown Restaurant'}\n"
        f"📅 Date: {reservation.date}\n"
        f"🕐 Time: {reservation.time}\n\n"
        "Your reservation has been successfully cancelled."
    )


class ReservationTools:
    """Tool handlers for availability and the reservation lifecycle."""

    def __init__(self, reservations: ReservationService, restaurants: RestaurantService):
        self.reservations = reservations
        self.restaurants = restaurants

    def register(self, server):
        server.register_tool(
            self.check_availability,
            description="Check if a restaurant has availability for a specific date, time, and party size",
            args_model=AvailabilityArgs,
        )
        server.register_tool(
            self.make_reservation,
            description="Make a restaurant reservation with customer details and special requests",
            args_model=MakeReservationArgs,
        )
        server.register_tool(
            self.view_reservations,
            description="View all reservations for a customer by their email address",
            args_model=ViewReservationsArgs,
        )
        server.register_tool(
            self.cancel_reservation,
            description="Cancel an existing reservation using the reservation ID and customer email",
            args_model=CancelReservationArgs,
        )

    async def _restaurant_name(self, restaurant_id: str) -> str:
        restaurant = await self.restaurants.get_restaurant_by_id(restaurant_id)
        return restaurant.name if restaurant and restaurant.name else "Unknown Restaurant"

    async def check_availability(self, restaurant_id: str, date: str, time: str, party_size: int) -> str:
        try:
            restaurant = await self.restaurants.get_restaurant_by_id(restaurant_id)
            if restaurant is None:
                return "❌ Restaurant not found. Please check the restaurant ID."
            availability = await self.reservations.check_availability(restaurant_id, date, time, party_size)
        except Exception as e:
            logger.error(f"Availability check failed: {e}")
            return f"❌ Error checking availability: {error_message(e)}"

        icon = "✅" if availability.is_available else "❌"
        return (
            f"{icon} **{restaurant.name}** {availability.message}\n\n"
            f"📅 Date: {date}\n"
            f"🕐 Time: {time}\n"
            f"👥 Party Size: {party_size}\n\n"
            f"Other available times: {', '.join(availability.alternative_times)}"
        )

    async def make_reservation(
        self,
        restaurant_id: str,
        date: str,
        time: str,
        party_size: int,
        customer_name: str,
        customer_email: str,
        customer_phone: str,
        special_requests: Optional[str] = None,
    ) -> str:
        try:
            restaurant = await self.restaurants.get_restaurant_by_id(restaurant_id)
            if restaurant is None:
                return "❌ Restaurant not found. Please check the restaurant ID."
            reservation = await self.reservations.make_reservation(
                restaurant_id,
                date,
                time,
                party_size,
                customer_name,
                customer_email,
                customer_phone,
                special_requests,
                restaurant_name=restaurant.name or "",
            )
        except Exception as e:
            logger.error(f"Reservation failed: {e}")
            return f"❌ Error making reservation: {error_message(e)}"
        return format_reservation_confirmation(reservation, restaurant.phone)

    async def view_reservations(self, customer_email: str) -> str:
        try:
            reservations = await self.reservations.get_reservations_by_email(customer_email)
            if not reservations:
                return f"📋 No reservations found for {customer_email}"
            for reservation in reservations:
                if not reservation.restaurant_name:
                    reservation.restaurant_name = await self._restaurant_name(reservation.restaurant_id)
        except Exception as e:
            logger.error(f"Reservation lookup failed: {e}")
            return f"❌ Error retrieving reservations: {error_message(e)}"

        formatted = "\n\n".join(format_reservation(r) for r in reservations)
        return f"📋 **Your Reservations:**\n\n{formatted}"

    async def cancel_reservation(self, reservation_id: str, customer_email: str) -> str:
        try:
            cancelled = await self.reservations.cancel_reservation(reservation_id, customer_email)
            if not cancelled.restaurant_name:
                cancelled.restaurant_name = await self._restaurant_name(cancelled.restaurant_id)
        except ReservationNotFoundError as e:
            return f"❌ {e}"
        except ReservationAlreadyCancelledError as e:
            return f"❌ {e}. No changes were made."
        except Exception as e:
            logger.error(f"Cancellation failed: {e}")
            return f"❌ Error cancelling reservation: {error_message(e)}"
        return format_cancellation(cancelled)
