"""
Availability derivation for one showing.

A seat is taken iff an active line item of a non-cancelled booking references it, or a
hold whose expires_at is still in the future does. Expiry is evaluated against the
`now` passed in, never against wall time.
"""

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Iterable
from uuid import UUID

import attrs

from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold
from cinema_booking.service.booking.domain.entity.showing_entity import Seat, Showing


class SeatStatus(StrEnum):
    AVAILABLE = 'available'
    HELD = 'held'
    BOOKED = 'booked'


@attrs.define(frozen=True)
class SeatAvailability:
    seat: Seat
    price: Decimal
    status: SeatStatus
    held_by_viewer: bool = False

    @property
    def available(self) -> bool:
        return self.status == SeatStatus.AVAILABLE


def active_holds_by_seat(holds: Iterable[SeatHold], *, now: datetime) -> dict[UUID, SeatHold]:
    return {hold.seat_id: hold for hold in holds if hold.is_active(now=now)}


def find_conflicting_seats(
    *,
    requested_seat_ids: Iterable[UUID],
    booked_seat_ids: Iterable[UUID],
    holds: Iterable[SeatHold],
    now: datetime,
    holder_key: str | None = None,
) -> list[UUID]:
    """Requested seats that are booked, or held by anyone other than `holder_key`."""
    booked = set(booked_seat_ids)
    held_by_others = {
        seat_id
        for seat_id, hold in active_holds_by_seat(holds, now=now).items()
        if hold.holder_key != holder_key
    }
    return [
        seat_id for seat_id in requested_seat_ids if seat_id in booked or seat_id in held_by_others
    ]


def build_availability(
    *,
    showing: Showing,
    seats: Iterable[Seat],
    booked_seat_ids: Iterable[UUID],
    holds: Iterable[SeatHold],
    now: datetime,
    viewer_holder_key: str | None = None,
) -> list[SeatAvailability]:
    booked = set(booked_seat_ids)
    active_holds = active_holds_by_seat(holds, now=now)

    result = []
    for seat in sorted(seats, key=lambda s: (s.row_label, s.seat_number)):
        hold = active_holds.get(seat.id)
        if seat.id in booked:
            status = SeatStatus.BOOKED
        elif hold is not None:
            status = SeatStatus.HELD
        else:
            status = SeatStatus.AVAILABLE
        result.append(
            SeatAvailability(
                seat=seat,
                price=showing.price_for(seat),
                status=status,
                held_by_viewer=(
                    status == SeatStatus.HELD
                    and viewer_holder_key is not None
                    and hold is not None
                    and hold.holder_key == viewer_holder_key
                ),
            )
        )
    return result
