from abc import ABC, abstractmethod
from datetime import datetime
from uuid import UUID

from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold


class ISeatHoldCommandRepo(ABC):
    """
    Repository for seat holds (soft reservations).

    Rows are unique per (showing, seat); expired rows may linger until swept, so every
    caller filters by expiry.
    """

    @abstractmethod
    async def list_active(self, *, showing_id: UUID, now: datetime) -> list[SeatHold]:
        pass

    @abstractmethod
    async def delete_by_holder(self, *, showing_id: UUID, holder_key: str) -> int:
        """
        Delete every hold of `holder_key` on the showing

        Returns:
            Number of rows removed (0 when nothing was held)
        """
        pass

    @abstractmethod
    async def delete_expired(self, *, now: datetime, showing_id: UUID | None = None) -> int:
        """Delete holds with expires_at <= now, for one showing or all of them."""
        pass

    @abstractmethod
    async def create_many(self, *, holds: list[SeatHold]) -> list[SeatHold]:
        pass
