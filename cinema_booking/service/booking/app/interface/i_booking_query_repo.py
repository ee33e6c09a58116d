from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from cinema_booking.service.booking.app.dto.booking_view import BookingStats, BookingView
from cinema_booking.service.booking.domain.entity.booking_entity import BookingStatus


class IBookingQueryRepo(ABC):
    @abstractmethod
    async def find_by_reference(self, *, booking_reference: str) -> list[BookingView]:
        """
        All bookings carrying the (already normalized) reference.

        Returns a list so callers can detect a duplicate instead of picking one silently.
        """
        pass

    @abstractmethod
    async def get_view_by_id(self, *, booking_id: UUID) -> BookingView | None:
        pass

    @abstractmethod
    async def get_view_by_idempotency_key(self, *, idempotency_key: str) -> BookingView | None:
        pass

    @abstractmethod
    async def list_by_user(
        self, *, user_id: UUID, status: BookingStatus | None = None
    ) -> list[BookingView]:
        """Newest first"""
        pass

    @abstractmethod
    async def list_history(
        self,
        *,
        status: BookingStatus | None = None,
        showing_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[BookingView]:
        """Newest first"""
        pass

    @abstractmethod
    async def get_stats(self, *, day_start: datetime, day_end: datetime) -> BookingStats:
        """
        Aggregate counters; revenue counts confirmed bookings only.

        Args:
            day_start: Inclusive start of "today"
            day_end: Exclusive end of "today"
        """
        pass
