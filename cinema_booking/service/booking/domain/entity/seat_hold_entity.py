from datetime import datetime, timedelta
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7


@attrs.define(frozen=True)
class SeatHold:
    """A lease on one seat of one showing; it stops counting once expires_at passes."""

    showing_id: UUID
    seat_id: UUID
    holder_key: str
    created_at: datetime
    expires_at: datetime
    id: UUID = attrs.field(factory=uuid7)

    @classmethod
    def create(
        cls, *, showing_id: UUID, seat_id: UUID, holder_key: str, now: datetime, ttl: timedelta
    ) -> 'SeatHold':
        return cls(
            showing_id=showing_id,
            seat_id=seat_id,
            holder_key=holder_key,
            created_at=now,
            expires_at=now + ttl,
        )

    def is_active(self, *, now: datetime) -> bool:
        return self.expires_at > now
