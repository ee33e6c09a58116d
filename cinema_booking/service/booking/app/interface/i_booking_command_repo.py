"""
Booking Command Repository Interface

Used inside a unit of work; the showing lock must already be held for writes.
"""

from abc import ABC, abstractmethod
from typing import Iterable
from uuid import UUID

from cinema_booking.service.booking.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        """
        Get single booking by ID (for validation before command operations)

        Args:
            booking_id: Booking ID

        Returns:
            Booking entity with its line items, or None if not found
        """
        pass

    @abstractmethod
    async def get_by_idempotency_key(self, *, idempotency_key: str) -> Booking | None:
        pass

    @abstractmethod
    async def list_booked_seat_ids(
        self, *, showing_id: UUID, seat_ids: Iterable[UUID] | None = None
    ) -> set[UUID]:
        """
        Seats referenced by active line items of the showing

        Args:
            showing_id: Showing ID
            seat_ids: Restrict the check to these seats (all seats when None)
        """
        pass

    @abstractmethod
    async def reference_exists(self, *, booking_reference: str) -> bool:
        pass

    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        """Insert the booking header and its line items (flushed, not committed)."""
        pass

    @abstractmethod
    async def update_cancelled(self, *, booking: Booking) -> Booking:
        """Persist status, cancelled_at, refund_amount and deactivate the line items."""
        pass
