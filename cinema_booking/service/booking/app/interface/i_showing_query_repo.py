from abc import ABC, abstractmethod
from typing import Iterable
from uuid import UUID

from cinema_booking.service.booking.domain.entity.showing_entity import Seat, Showing


class IShowingQueryRepo(ABC):
    """Read-only access to catalog data (showings and seat layouts)."""

    @abstractmethod
    async def get_showing(self, *, showing_id: UUID) -> Showing | None:
        pass

    @abstractmethod
    async def list_seats(self, *, screen_id: UUID) -> list[Seat]:
        """All seats of a screen, ordered by row label then seat number."""
        pass

    @abstractmethod
    async def get_seats(self, *, seat_ids: Iterable[UUID]) -> list[Seat]:
        """Seats matching the ids; unknown ids are silently absent from the result."""
        pass
