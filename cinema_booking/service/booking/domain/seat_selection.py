from typing import Iterable
from uuid import UUID

from cinema_booking.platform.exception.exceptions import (
    NoSeatsSelectedError,
    NotFoundError,
    ValidationError,
)
from cinema_booking.service.booking.domain.entity.showing_entity import Seat, Showing


def validate_seat_selection(seat_ids: Iterable[UUID] | None, *, max_seats: int) -> list[UUID]:
    """Checks that need no storage; run before any lock is taken."""
    requested = list(seat_ids or [])
    if not requested:
        raise NoSeatsSelectedError()
    if len(set(requested)) != len(requested):
        raise ValidationError('Each seat may only be selected once', field='seat_ids')
    if len(requested) > max_seats:
        raise ValidationError(f'At most {max_seats} seats per booking', field='seat_ids')
    return requested


def ensure_showing_bookable(showing: Showing | None) -> Showing:
    if showing is None or not showing.is_active:
        raise NotFoundError('Showing not found', code='showing_not_found')
    return showing


def resolve_requested_seats(
    *, showing: Showing, requested: list[UUID], seats: Iterable[Seat]
) -> list[Seat]:
    """Seats in request order; every id must belong to the showing's screen."""
    by_id = {seat.id: seat for seat in seats if showing.owns(seat)}
    unknown = [seat_id for seat_id in requested if seat_id not in by_id]
    if unknown:
        raise ValidationError(
            f'Seats not part of this showing: {", ".join(str(s) for s in unknown)}',
            field='seat_ids',
        )
    return [by_id[seat_id] for seat_id in requested]
