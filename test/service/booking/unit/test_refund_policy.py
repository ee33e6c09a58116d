"""
Unit tests for the refund policy

Test Coverage:
1. Time-window policy boundary (inclusive at exactly 24 hours)
2. Flat-fee policy regardless of timing
3. Totality over past showings (zero and negative hours)
4. Customer-facing quote messages
"""

from decimal import Decimal

import pytest

from cinema_booking.service.booking.domain.refund_policy import (
    RefundOutcome,
    RefundPolicy,
    RefundPolicyName,
    compute_refund,
    quote_refund,
)


pytestmark = pytest.mark.unit


class TestTimeWindowPolicy:
    def setup_method(self):
        self.policy = RefundPolicy.time_window(window_hours=24)

    def test_full_refund_at_exactly_the_window(self):
        assert compute_refund(Decimal('1000'), 24, self.policy) == Decimal('1000.00')

    def test_no_refund_just_inside_the_window(self):
        assert compute_refund(Decimal('1000'), 23.999, self.policy) == Decimal('0.00')

    def test_full_refund_days_ahead(self):
        assert compute_refund(Decimal('1500.50'), 96.5, self.policy) == Decimal('1500.50')

    @pytest.mark.parametrize('hours', [0, -0.5, -48])
    def test_started_or_past_showing_gets_nothing(self, hours):
        assert compute_refund(Decimal('1000'), hours, self.policy) == Decimal('0.00')


class TestFlatFeePolicy:
    def setup_method(self):
        self.policy = RefundPolicy.flat_fee(rate=Decimal('0.5'))

    @pytest.mark.parametrize('hours', [200, 24, 1, 0, -3])
    def test_half_refund_regardless_of_timing(self, hours):
        assert compute_refund(Decimal('1000'), hours, self.policy) == Decimal('500.00')

    def test_rounds_half_up_to_cents(self):
        assert compute_refund(Decimal('100.05'), 5, self.policy) == Decimal('50.03')


class TestPolicyFromName:
    def test_time_window_by_name(self):
        policy = RefundPolicy.from_name('time_window', window_hours=12)
        assert policy.name == RefundPolicyName.TIME_WINDOW
        assert policy.window_hours == 12

    def test_flat_fee_by_name(self):
        policy = RefundPolicy.from_name('flat_fee', flat_rate=0.25)
        assert policy.rate_for(1) == Decimal('0.25')

    def test_unknown_name_is_rejected(self):
        with pytest.raises(ValueError):
            RefundPolicy.from_name('store_credit')


class TestRefundQuote:
    def test_full_refund_message(self):
        quote = quote_refund(Decimal('1600'), 30, RefundPolicy.time_window())

        assert quote.outcome == RefundOutcome.FULL
        assert quote.cancellation_fee == Decimal('0.00')
        assert quote.message == 'Booking cancelled. Full refund will be processed.'

    def test_no_refund_message(self):
        quote = quote_refund(Decimal('1600'), 2, RefundPolicy.time_window())

        assert quote.outcome == RefundOutcome.NONE
        assert quote.refund_amount == Decimal('0.00')
        assert quote.cancellation_fee == Decimal('1600.00')
        assert quote.message == (
            'Booking cancelled. No refund available (less than 24 hours before show).'
        )

    def test_partial_refund_message_names_amount_and_fee(self):
        quote = quote_refund(Decimal('1000'), 2, RefundPolicy.flat_fee(), currency='PKR')

        assert quote.outcome == RefundOutcome.PARTIAL
        assert quote.refund_amount == Decimal('500.00')
        assert quote.cancellation_fee == Decimal('500.00')
        assert quote.message == (
            'Booking cancelled. 50% refund (PKR 500.00) will be processed. '
            'Cancellation fee: PKR 500.00'
        )
