from datetime import datetime
from uuid import UUID

import attrs

from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold


@attrs.define(frozen=True)
class HoldResult:
    """All-or-nothing: either every requested seat is held or none is."""

    accepted: bool
    conflicting_seats: list[UUID] = attrs.field(factory=list)
    holds: list[SeatHold] = attrs.field(factory=list)
    expires_at: datetime | None = None
