from datetime import date, datetime, time, tzinfo
from decimal import Decimal
from enum import StrEnum
from uuid import UUID

import attrs

from cinema_booking.service.booking.domain.value_object.money import to_money


class SeatCategory(StrEnum):
    REGULAR = 'regular'
    PREMIUM = 'premium'
    VIP = 'vip'


@attrs.define(frozen=True)
class Seat:
    id: UUID
    screen_id: UUID
    row_label: str
    seat_number: int
    category: SeatCategory = SeatCategory.REGULAR
    price_multiplier: Decimal = Decimal('1.00')

    @property
    def label(self) -> str:
        """Display only; seat identity is always the id."""
        return f'{self.row_label}{self.seat_number}'


@attrs.define(frozen=True)
class Showing:
    id: UUID
    movie_ref: str
    screen_id: UUID
    show_date: date
    show_time: time
    base_price: Decimal
    is_active: bool = True

    def starts_at(self, *, tz: tzinfo) -> datetime:
        return datetime.combine(self.show_date, self.show_time, tzinfo=tz)

    def price_for(self, seat: Seat) -> Decimal:
        return to_money(self.base_price * seat.price_multiplier)

    def owns(self, seat: Seat) -> bool:
        return seat.screen_id == self.screen_id
