from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

import attrs

from cinema_booking.service.booking.domain.entity.booking_entity import BookingSeat, BookingStatus


@attrs.define(frozen=True)
class BookingView:
    """Read-only projection of a booking, enriched with showing data and a display name."""

    id: UUID
    booking_reference: str
    status: BookingStatus
    showing_id: UUID
    movie_ref: str
    screen_id: UUID
    show_date: date
    show_time: time
    seats: list[BookingSeat]
    total_amount: Decimal
    created_at: datetime
    user_id: Optional[UUID] = None
    customer_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    idempotency_key: Optional[str] = None
    holder_key: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None


@attrs.define(frozen=True)
class BookingStats:
    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    total_refunded: Decimal
    today_bookings: int
    today_revenue: Decimal
