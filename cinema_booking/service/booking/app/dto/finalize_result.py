from decimal import Decimal
from uuid import UUID

import attrs

from cinema_booking.service.booking.domain.entity.booking_entity import Booking
from cinema_booking.service.booking.domain.refund_policy import RefundQuote


@attrs.define(frozen=True)
class FinalizeResult:
    booking: Booking
    replayed: bool = False

    @property
    def booking_id(self) -> UUID:
        return self.booking.id

    @property
    def booking_reference(self) -> str:
        return self.booking.booking_reference


@attrs.define(frozen=True)
class CancelResult:
    booking: Booking
    quote: RefundQuote

    @property
    def refund_amount(self) -> Decimal:
        return self.quote.refund_amount
