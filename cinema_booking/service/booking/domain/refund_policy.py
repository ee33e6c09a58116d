"""
Refund policy: a pure function of the amount paid and the time left before the showing.

Both observed variants are one parameterized policy:

- time_window: full refund when cancelled at least 24 hours ahead, nothing afterwards
- flat_fee: 50% refund whenever cancelled, the remainder is the cancellation fee
"""

from decimal import Decimal
from enum import StrEnum

import attrs

from cinema_booking.service.booking.domain.value_object.money import to_money


class RefundPolicyName(StrEnum):
    TIME_WINDOW = 'time_window'
    FLAT_FEE = 'flat_fee'


class RefundOutcome(StrEnum):
    FULL = 'full'
    PARTIAL = 'partial'
    NONE = 'none'


@attrs.define(frozen=True)
class RefundPolicy:
    """
    `rate_inside_window` applies while hours_until_showing >= window_hours (inclusive),
    `rate_outside_window` once the showing is closer than that. A policy without a
    window always applies `rate_inside_window`.
    """

    name: str
    window_hours: float | None
    rate_inside_window: Decimal
    rate_outside_window: Decimal = Decimal('0')

    @classmethod
    def time_window(cls, *, window_hours: float = 24.0) -> 'RefundPolicy':
        return cls(
            name=RefundPolicyName.TIME_WINDOW,
            window_hours=window_hours,
            rate_inside_window=Decimal('1'),
            rate_outside_window=Decimal('0'),
        )

    @classmethod
    def flat_fee(cls, *, rate: Decimal | float = Decimal('0.5')) -> 'RefundPolicy':
        rate = Decimal(str(rate))
        return cls(
            name=RefundPolicyName.FLAT_FEE,
            window_hours=None,
            rate_inside_window=rate,
            rate_outside_window=rate,
        )

    @classmethod
    def from_name(
        cls, name: str, *, window_hours: float = 24.0, flat_rate: Decimal | float = Decimal('0.5')
    ) -> 'RefundPolicy':
        match RefundPolicyName(name):
            case RefundPolicyName.TIME_WINDOW:
                return cls.time_window(window_hours=window_hours)
            case RefundPolicyName.FLAT_FEE:
                return cls.flat_fee(rate=flat_rate)

    def rate_for(self, hours_until_showing: float) -> Decimal:
        if self.window_hours is None or hours_until_showing >= self.window_hours:
            return self.rate_inside_window
        return self.rate_outside_window


def compute_refund(
    total_amount: Decimal, hours_until_showing: float, policy: RefundPolicy
) -> Decimal:
    """Total over its domain: zero or negative hours mean the showing has started or passed."""
    refund = to_money(Decimal(total_amount) * policy.rate_for(hours_until_showing))
    return max(Decimal('0.00'), min(refund, to_money(total_amount)))


@attrs.define(frozen=True)
class RefundQuote:
    refund_amount: Decimal
    cancellation_fee: Decimal
    outcome: RefundOutcome
    message: str


def quote_refund(
    total_amount: Decimal, hours_until_showing: float, policy: RefundPolicy, *, currency: str = 'PKR'
) -> RefundQuote:
    total = to_money(total_amount)
    refund = compute_refund(total, hours_until_showing, policy)
    fee = total - refund

    if refund == total:
        outcome = RefundOutcome.FULL
        message = 'Booking cancelled. Full refund will be processed.'
    elif refund == 0:
        outcome = RefundOutcome.NONE
        if policy.window_hours is None:
            message = 'Booking cancelled. No refund available.'
        else:
            message = (
                'Booking cancelled. No refund available '
                f'(less than {policy.window_hours:g} hours before show).'
            )
    else:
        outcome = RefundOutcome.PARTIAL
        percent = f'{(policy.rate_for(hours_until_showing) * 100).normalize():f}'
        message = (
            f'Booking cancelled. {percent}% refund ({currency} {refund}) will be processed. '
            f'Cancellation fee: {currency} {fee}'
        )

    return RefundQuote(refund_amount=refund, cancellation_fee=fee, outcome=outcome, message=message)
