"""
Unit tests for FinalizeBookingUseCase

Test Coverage:
1. Input validation before any lock is taken
2. Conflict detection (booked seats, other holders' holds)
3. Successful finalize: price check, reference, insert, hold cleanup, commit
4. Idempotent replay and key reuse
5. Storage-level failures and timeout
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError
from uuid_utils.compat import uuid7

from cinema_booking.platform.exception.exceptions import (
    AuthenticationError,
    BookingIntegrityError,
    ConflictError,
    FinalizeTimeoutError,
    NoSeatsSelectedError,
    SeatsUnavailableError,
    ValidationError,
)
from cinema_booking.service.booking.app.command.finalize_booking_use_case import (
    FinalizeBookingUseCase,
)
from cinema_booking.service.booking.domain.entity.booking_entity import BookingStatus
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold
from cinema_booking.service.booking.domain.value_object.booking_reference import (
    is_valid_booking_reference,
)
from test.shared.fake_unit_of_work import FakeUnitOfWork, make_showing_with_seats
from test.shared.frozen_clock import FrozenClock


pytestmark = pytest.mark.unit


class TestFinalizeBookingUseCase:
    def setup_method(self):
        self.showing, self.seats = make_showing_with_seats()
        self.a1, self.a2 = self.seats
        self.uow = FakeUnitOfWork(showing=self.showing, seats=self.seats)
        self.clock = FrozenClock()
        self.caller = Caller(user_id=uuid7(), name='Customer One')
        self.use_case = FinalizeBookingUseCase(
            uow_factory=lambda: self.uow,
            clock=self.clock,
            max_seats=10,
            timeout_seconds=1.0,
            reference_prefix='BK',
            reference_max_attempts=3,
        )

    async def _finalize(self, seat_ids, total='800.00', **kwargs):
        kwargs.setdefault('caller', self.caller)
        return await self.use_case.finalize(
            showing_id=self.showing.id,
            seat_ids=seat_ids,
            total_amount=Decimal(total),
            **kwargs,
        )

    # ==================== Validation ====================

    @pytest.mark.asyncio
    async def test_no_seats_selected(self):
        with pytest.raises(NoSeatsSelectedError):
            await self._finalize([])

        assert self.uow.locked == []

    @pytest.mark.asyncio
    async def test_guest_without_contact_details_is_not_authenticated(self):
        with pytest.raises(AuthenticationError) as exc_info:
            await self._finalize([self.a1.id], caller=None)

        assert exc_info.value.code == 'not_authenticated'
        assert self.uow.locked == []

    @pytest.mark.asyncio
    async def test_guest_missing_email_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize([self.a1.id], caller=None, guest_name='Ayesha')

        assert exc_info.value.field == 'guest_email'

    @pytest.mark.asyncio
    async def test_overlong_guest_phone_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize(
                [self.a1.id],
                caller=None,
                guest_name='Ayesha',
                guest_email='ayesha@example.com',
                guest_phone='9' * 51,
            )

        assert exc_info.value.field == 'guest_phone'
        assert self.uow.locked == []

    @pytest.mark.asyncio
    async def test_passenger_name_for_unselected_seat(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize([self.a1.id], passenger_names={self.a2.id: 'Bilal'})

        assert exc_info.value.field == 'passenger_names'

    @pytest.mark.asyncio
    async def test_overlong_passenger_name(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize([self.a1.id], passenger_names={self.a1.id: 'B' * 256})

        assert exc_info.value.field == 'passenger_names'
        self.uow.booking_command_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_total_mismatch(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize([self.a1.id], total='799.99')

        assert exc_info.value.field == 'total_amount'
        self.uow.booking_command_repo.create.assert_not_awaited()
        assert not self.uow.committed

    # ==================== Conflicts ====================

    @pytest.mark.asyncio
    async def test_booked_seat_is_unavailable(self):
        self.uow.booking_command_repo.list_booked_seat_ids.return_value = [self.a1.id]

        with pytest.raises(SeatsUnavailableError) as exc_info:
            await self._finalize([self.a1.id, self.a2.id], total='1600.00')

        assert exc_info.value.conflicting_seats == [str(self.a1.id)]
        self.uow.booking_command_repo.create.assert_not_awaited()
        assert self.uow.rolled_back

    @pytest.mark.asyncio
    async def test_seat_held_by_another_holder_is_unavailable(self):
        self.uow.seat_hold_command_repo.list_active.return_value = [
            SeatHold.create(
                showing_id=self.showing.id,
                seat_id=self.a1.id,
                holder_key='user:someone-else',
                now=self.clock.now(),
                ttl=timedelta(minutes=10),
            )
        ]

        with pytest.raises(SeatsUnavailableError):
            await self._finalize([self.a1.id])

    @pytest.mark.asyncio
    async def test_own_hold_does_not_block(self):
        self.uow.seat_hold_command_repo.list_active.return_value = [
            SeatHold.create(
                showing_id=self.showing.id,
                seat_id=self.a1.id,
                holder_key=self.caller.holder_key,
                now=self.clock.now(),
                ttl=timedelta(minutes=10),
            )
        ]

        result = await self._finalize([self.a1.id])

        assert result.booking.status == BookingStatus.CONFIRMED

    # ==================== Success ====================

    @pytest.mark.asyncio
    async def test_member_finalize_success(self):
        result = await self._finalize(
            [self.a1.id, self.a2.id], total='1600', passenger_names={self.a2.id: ' Bilal '}
        )

        booking = result.booking
        assert not result.replayed
        assert is_valid_booking_reference(booking.booking_reference)
        assert booking.user_id == self.caller.user_id
        assert booking.total_amount == Decimal('1600.00')
        assert [seat.seat_label for seat in booking.seats] == ['A1', 'A2']
        assert booking.seats[1].passenger_name == 'Bilal'
        assert self.uow.locked == [self.showing.id]
        self.uow.booking_command_repo.create.assert_awaited_once_with(booking=booking)
        self.uow.seat_hold_command_repo.delete_by_holder.assert_awaited_once_with(
            showing_id=self.showing.id, holder_key=self.caller.holder_key
        )
        assert self.uow.committed

    @pytest.mark.asyncio
    async def test_guest_finalize_keeps_contact_details(self):
        result = await self._finalize(
            [self.a1.id],
            caller=None,
            guest_name='Ayesha Khan',
            guest_email='Ayesha@Example.com',
            guest_phone='+92 300 1234567',
            holder_key='guest:session-1',
        )

        assert result.booking.is_guest
        assert result.booking.guest.email == 'ayesha@example.com'
        self.uow.seat_hold_command_repo.delete_by_holder.assert_awaited_once_with(
            showing_id=self.showing.id, holder_key='guest:session-1'
        )

    @pytest.mark.asyncio
    async def test_reference_collision_is_retried(self):
        self.uow.booking_command_repo.reference_exists.side_effect = [True, False]

        result = await self._finalize([self.a1.id])

        assert is_valid_booking_reference(result.booking_reference)
        assert self.uow.booking_command_repo.reference_exists.await_count == 2

    @pytest.mark.asyncio
    async def test_reference_attempts_exhausted(self):
        self.uow.booking_command_repo.reference_exists.return_value = True

        with pytest.raises(BookingIntegrityError):
            await self._finalize([self.a1.id])

        self.uow.booking_command_repo.create.assert_not_awaited()

    # ==================== Idempotency ====================

    @pytest.mark.asyncio
    async def test_replay_returns_existing_booking(self):
        first = await self._finalize([self.a1.id], idempotency_key='retry-1')
        self.uow.booking_command_repo.get_by_idempotency_key.return_value = first.booking
        self.uow.booking_command_repo.create.reset_mock()

        second = await self._finalize([self.a1.id], idempotency_key=' retry-1 ')

        assert second.replayed
        assert second.booking_id == first.booking_id
        self.uow.booking_command_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_key_reused_for_different_seats(self):
        first = await self._finalize([self.a1.id], idempotency_key='retry-1')
        self.uow.booking_command_repo.get_by_idempotency_key.return_value = first.booking

        with pytest.raises(ConflictError) as exc_info:
            await self._finalize([self.a2.id], idempotency_key='retry-1')

        assert exc_info.value.code == 'idempotency_key_conflict'

    @pytest.mark.asyncio
    async def test_key_reused_by_another_caller(self):
        first = await self._finalize([self.a1.id], idempotency_key='retry-1')
        self.uow.booking_command_repo.get_by_idempotency_key.return_value = first.booking

        with pytest.raises(ConflictError):
            await self._finalize(
                [self.a1.id], idempotency_key='retry-1', caller=Caller(user_id=uuid7())
            )

    @pytest.mark.asyncio
    async def test_guest_replay_requires_same_session(self):
        guest = {
            'caller': None,
            'guest_name': 'Ayesha Khan',
            'guest_email': 'ayesha@example.com',
            'idempotency_key': 'retry-1',
        }
        first = await self._finalize([self.a1.id], holder_key='guest:session-1', **guest)
        self.uow.booking_command_repo.get_by_idempotency_key.return_value = first.booking

        assert first.booking.holder_key == 'guest:session-1'
        replay = await self._finalize([self.a1.id], holder_key='guest:session-1', **guest)
        assert replay.replayed is True
        assert replay.booking_id == first.booking_id

        for other_session in ('guest:session-2', None):
            with pytest.raises(ConflictError) as exc_info:
                await self._finalize([self.a1.id], holder_key=other_session, **guest)
            assert exc_info.value.code == 'idempotency_key_conflict'

    @pytest.mark.asyncio
    async def test_overlong_idempotency_key(self):
        with pytest.raises(ValidationError) as exc_info:
            await self._finalize([self.a1.id], idempotency_key='k' * 256)

        assert exc_info.value.field == 'idempotency_key'

    # ==================== Failures ====================

    @pytest.mark.asyncio
    async def test_unique_index_violation_maps_to_seats_unavailable(self):
        self.uow.booking_command_repo.create.side_effect = IntegrityError(
            'INSERT INTO booking_seat',
            {},
            Exception('UNIQUE constraint failed: booking_seat.showing_id, booking_seat.seat_id'),
        )

        with pytest.raises(SeatsUnavailableError):
            await self._finalize([self.a1.id])

        assert not self.uow.committed

    @pytest.mark.asyncio
    async def test_other_integrity_violation_is_fatal(self):
        self.uow.booking_command_repo.create.side_effect = IntegrityError(
            'INSERT INTO booking', {}, Exception('NOT NULL constraint failed: booking.status')
        )

        with pytest.raises(BookingIntegrityError) as exc_info:
            await self._finalize([self.a1.id])

        assert exc_info.value.recoverable is False

    @pytest.mark.asyncio
    async def test_timeout_reports_unknown_outcome(self):
        self.use_case.timeout_seconds = 0.05
        self.uow.lock_delay = 1.0

        with pytest.raises(FinalizeTimeoutError) as exc_info:
            await self._finalize([self.a1.id])

        assert exc_info.value.status_code == 504
        assert self.uow.rolled_back
