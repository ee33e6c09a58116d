from datetime import datetime
from decimal import Decimal
from enum import StrEnum
import re
from typing import Optional
from uuid import UUID

import attrs
from uuid_utils.compat import uuid7

from cinema_booking.platform.exception.exceptions import ConflictError, ValidationError
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.domain.entity.showing_entity import SeatCategory
from cinema_booking.service.booking.domain.value_object.money import to_money


_EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

# Column widths of the booking table
MAX_GUEST_NAME_LENGTH = 255
MAX_GUEST_EMAIL_LENGTH = 255
MAX_GUEST_PHONE_LENGTH = 50
MAX_PASSENGER_NAME_LENGTH = 255


class BookingStatus(StrEnum):
    # pending and refunded are reserved for payment-in-flight flows; nothing produces them yet
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'


@attrs.define(frozen=True)
class GuestInfo:
    name: str
    email: str
    phone: Optional[str] = None

    @classmethod
    def create(cls, *, name: str | None, email: str | None, phone: str | None = None) -> 'GuestInfo':
        name = (name or '').strip()
        email = (email or '').strip()
        phone = (phone or '').strip() or None
        if not name:
            raise ValidationError('Guest name is required', field='guest_name')
        if not email:
            raise ValidationError('Guest email is required', field='guest_email')
        if not _EMAIL_PATTERN.match(email):
            raise ValidationError('Guest email is not a valid address', field='guest_email')
        for field, value, limit in (
            ('guest_name', name, MAX_GUEST_NAME_LENGTH),
            ('guest_email', email, MAX_GUEST_EMAIL_LENGTH),
            ('guest_phone', phone, MAX_GUEST_PHONE_LENGTH),
        ):
            if value and len(value) > limit:
                raise ValidationError(f'Must be at most {limit} characters', field=field)
        return cls(name=name, email=email.lower(), phone=phone)


@attrs.define
class BookingSeat:
    """Line item; deactivated (never deleted) when the booking is cancelled."""

    seat_id: UUID
    seat_label: str
    category: SeatCategory
    price: Decimal
    passenger_name: Optional[str] = None
    is_active: bool = True


@attrs.define
class Booking:
    id: UUID
    showing_id: UUID
    booking_reference: str
    total_amount: Decimal
    seats: list[BookingSeat] = attrs.field(factory=list)
    status: BookingStatus = BookingStatus.CONFIRMED
    user_id: Optional[UUID] = None
    guest: Optional[GuestInfo] = None
    idempotency_key: Optional[str] = None
    holder_key: Optional[str] = None  # member key or guest session key that placed it
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None

    @classmethod
    @Logger.io
    def confirm(
        cls,
        *,
        showing_id: UUID,
        booking_reference: str,
        seats: list[BookingSeat],
        user_id: UUID | None,
        guest: GuestInfo | None,
        idempotency_key: str | None,
        now: datetime,
        holder_key: str | None = None,
    ) -> 'Booking':
        """Build a confirmed booking; the total is always derived from its line items."""
        return cls(
            id=uuid7(),
            showing_id=showing_id,
            booking_reference=booking_reference,
            total_amount=to_money(sum((seat.price for seat in seats), Decimal('0'))),
            seats=seats,
            status=BookingStatus.CONFIRMED,
            user_id=user_id,
            guest=None if user_id else guest,
            idempotency_key=idempotency_key,
            holder_key=holder_key,
            created_at=now,
        )

    @property
    def seat_ids(self) -> frozenset[UUID]:
        return frozenset(seat.seat_id for seat in self.seats)

    @property
    def is_guest(self) -> bool:
        return self.user_id is None

    def is_owned_by(self, caller: Caller) -> bool:
        return self.user_id is not None and self.user_id == caller.user_id

    def is_placed_by(self, *, caller: Caller | None, holder_key: str | None) -> bool:
        """
        Same party that placed the booking: the member by user id, a guest by session key.
        Guest bookings placed without a session key match nobody.
        """
        if self.user_id is not None:
            return caller is not None and caller.user_id == self.user_id
        return caller is None and self.holder_key is not None and self.holder_key == holder_key

    def matches_intent(self, *, showing_id: UUID, seat_ids: frozenset[UUID]) -> bool:
        return self.showing_id == showing_id and self.seat_ids == seat_ids

    @Logger.io
    def validate_can_be_cancelled(self) -> None:
        """
        Raises:
            ConflictError: When the booking is already cancelled (refund stays untouched)
        """
        if self.status in (BookingStatus.CANCELLED, BookingStatus.REFUNDED):
            raise ConflictError('Booking is already cancelled', code='already_cancelled')

    @Logger.io
    def cancel(self, *, now: datetime, refund_amount: Decimal) -> 'Booking':
        self.validate_can_be_cancelled()
        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            cancelled_at=now,
            refund_amount=to_money(refund_amount),
            seats=[attrs.evolve(seat, is_active=False) for seat in self.seats],
        )
