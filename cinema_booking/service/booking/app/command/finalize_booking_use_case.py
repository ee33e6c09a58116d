from datetime import datetime
from decimal import Decimal
import time
from typing import Callable, Self
from uuid import UUID

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.exception.exceptions import (
    AuthenticationError,
    BookingIntegrityError,
    ConflictError,
    CustomBaseError,
    FinalizeTimeoutError,
    SeatsUnavailableError,
    ValidationError,
)
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.platform.metrics.booking_metrics import metrics
from cinema_booking.service.booking.app.dto.finalize_result import FinalizeResult
from cinema_booking.service.booking.app.interface.i_clock import IClock
from cinema_booking.service.booking.domain.entity.booking_entity import (
    Booking,
    BookingSeat,
    MAX_PASSENGER_NAME_LENGTH,
    GuestInfo,
)
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.domain.seat_availability import find_conflicting_seats
from cinema_booking.service.booking.domain.seat_selection import (
    ensure_showing_bookable,
    resolve_requested_seats,
    validate_seat_selection,
)
from cinema_booking.service.booking.domain.value_object.booking_reference import (
    generate_booking_reference,
)
from cinema_booking.service.booking.domain.value_object.money import to_money


MAX_IDEMPOTENCY_KEY_LENGTH = 255


def _is_active_seat_violation(error: IntegrityError) -> bool:
    message = str(error.orig)
    return 'uq_booking_seat_active' in message or 'booking_seat.showing_id' in message


def _is_idempotency_key_violation(error: IntegrityError) -> bool:
    return 'idempotency_key' in str(error.orig)


class FinalizeBookingUseCase:
    """
    Finalize booking - converts selected seats into a confirmed booking atomically

    Flow:
    1. Validate input (no lock held yet)
    2. Take the showing lock inside a fresh transaction
    3. Replay when the idempotency key already produced a booking
    4. Conflict check: active bookings and holds of other holders
    5. Verify total, generate reference, insert booking + line items
    6. Drop the caller's holds, commit (lock released with the transaction)

    Defence in depth: a partial unique index on active line items rejects a double
    sale even if the lock were bypassed.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        clock: IClock,
        max_seats: int | None = None,
        timeout_seconds: float | None = None,
        reference_prefix: str | None = None,
        reference_max_attempts: int | None = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.max_seats = max_seats or settings.MAX_SEATS_PER_BOOKING
        self.timeout_seconds = timeout_seconds or settings.FINALIZE_TIMEOUT_SECONDS
        self.reference_prefix = reference_prefix or settings.REFERENCE_PREFIX
        self.reference_max_attempts = reference_max_attempts or settings.REFERENCE_MAX_ATTEMPTS
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, clock=clock)

    @Logger.io
    async def finalize(
        self,
        *,
        showing_id: UUID,
        seat_ids: list[UUID],
        total_amount: Decimal,
        caller: Caller | None = None,
        guest_name: str | None = None,
        guest_email: str | None = None,
        guest_phone: str | None = None,
        holder_key: str | None = None,
        passenger_names: dict[UUID, str] | None = None,
        idempotency_key: str | None = None,
    ) -> FinalizeResult:
        """
        Args:
            holder_key: Hold owner whose holds are exempt from the conflict check and
                retired on success (member key or guest session key)
            passenger_names: Optional per-seat names, keyed by seat id

        Raises:
            SeatsUnavailableError: Another party holds or booked a requested seat
            FinalizeTimeoutError: Outcome unknown, re-query by idempotency key or reference
            BookingIntegrityError: Storage failure not explained by a conflict
        """
        try:
            requested = validate_seat_selection(seat_ids, max_seats=self.max_seats)
            guest = self._resolve_guest(
                caller=caller, name=guest_name, email=guest_email, phone=guest_phone
            )
            passenger_names = self._validate_passenger_names(passenger_names, requested)
            idempotency_key = self._normalize_idempotency_key(idempotency_key)
        except CustomBaseError:
            metrics.record_finalize(result='invalid')
            raise

        if holder_key is None and caller is not None:
            holder_key = caller.holder_key

        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.finalize_booking',
            attributes={'showing.id': str(showing_id), 'seat.count': len(requested)},
        ):
            try:
                with anyio.fail_after(self.timeout_seconds):
                    result = await self._finalize_under_lock(
                        showing_id=showing_id,
                        requested=requested,
                        total_amount=total_amount,
                        caller=caller,
                        guest=guest,
                        holder_key=holder_key,
                        passenger_names=passenger_names,
                        idempotency_key=idempotency_key,
                    )
            except TimeoutError:
                metrics.record_finalize(result='timeout', duration=time.perf_counter() - started)
                Logger.base.error(
                    f'⏱️ [FINALIZE] Timed out after {self.timeout_seconds}s on showing {showing_id}'
                )
                raise FinalizeTimeoutError() from None
            except SeatsUnavailableError:
                metrics.record_finalize(
                    result='seats_unavailable', duration=time.perf_counter() - started
                )
                raise
            except BookingIntegrityError:
                metrics.record_finalize(result='failed', duration=time.perf_counter() - started)
                raise
            except CustomBaseError:
                metrics.record_finalize(result='invalid', duration=time.perf_counter() - started)
                raise

        metrics.record_finalize(
            result='replayed' if result.replayed else 'confirmed',
            duration=time.perf_counter() - started,
        )
        return result

    async def _finalize_under_lock(
        self,
        *,
        showing_id: UUID,
        requested: list[UUID],
        total_amount: Decimal,
        caller: Caller | None,
        guest: GuestInfo | None,
        holder_key: str | None,
        passenger_names: dict[UUID, str],
        idempotency_key: str | None,
    ) -> FinalizeResult:
        try:
            async with self.uow_factory() as uow:
                await uow.lock_showing(showing_id=showing_id)

                # Step 1: Idempotent replay
                if idempotency_key:
                    existing = await uow.booking_command_repo.get_by_idempotency_key(
                        idempotency_key=idempotency_key
                    )
                    if existing is not None:
                        return self._replay(
                            existing=existing,
                            showing_id=showing_id,
                            requested=requested,
                            caller=caller,
                            holder_key=holder_key,
                        )

                # Step 2: Presence checks
                showing = ensure_showing_bookable(
                    await uow.showing_query_repo.get_showing(showing_id=showing_id)
                )
                seats = resolve_requested_seats(
                    showing=showing,
                    requested=requested,
                    seats=await uow.showing_query_repo.get_seats(seat_ids=requested),
                )

                # Step 3: Conflict check against the live state
                now = self.clock.now()
                conflicts = find_conflicting_seats(
                    requested_seat_ids=requested,
                    booked_seat_ids=await uow.booking_command_repo.list_booked_seat_ids(
                        showing_id=showing_id, seat_ids=requested
                    ),
                    holds=await uow.seat_hold_command_repo.list_active(
                        showing_id=showing_id, now=now
                    ),
                    now=now,
                    holder_key=holder_key,
                )
                if conflicts:
                    Logger.base.info(
                        f'🚫 [FINALIZE] Showing {showing_id}: {len(conflicts)} seat(s) unavailable'
                    )
                    raise SeatsUnavailableError(conflicts)

                # Step 4: Price check
                line_items = [
                    BookingSeat(
                        seat_id=seat.id,
                        seat_label=seat.label,
                        category=seat.category,
                        price=showing.price_for(seat),
                        passenger_name=passenger_names.get(seat.id),
                    )
                    for seat in seats
                ]
                expected_total = to_money(sum((item.price for item in line_items), Decimal('0')))
                if to_money(total_amount) != expected_total:
                    raise ValidationError(
                        f'Total amount {to_money(total_amount)} does not match {expected_total}',
                        field='total_amount',
                    )

                # Step 5: Reference + insert
                booking = Booking.confirm(
                    showing_id=showing_id,
                    booking_reference=await self._generate_unique_reference(uow=uow, now=now),
                    seats=line_items,
                    user_id=caller.user_id if caller else None,
                    guest=guest,
                    idempotency_key=idempotency_key,
                    now=now,
                    holder_key=holder_key,
                )
                await uow.booking_command_repo.create(booking=booking)

                # Step 6: Holds are superseded by the booking
                if holder_key:
                    await uow.seat_hold_command_repo.delete_by_holder(
                        showing_id=showing_id, holder_key=holder_key
                    )

                await uow.commit()
        except IntegrityError as e:
            if _is_active_seat_violation(e):
                Logger.base.warning(f'⚠️ [FINALIZE] Unique index rejected seats on {showing_id}')
                raise SeatsUnavailableError(requested) from e
            if _is_idempotency_key_violation(e):
                raise ConflictError(
                    'Idempotency key already used', code='idempotency_key_conflict'
                ) from e
            Logger.base.exception(f'💥 [FINALIZE] Integrity failure on showing {showing_id}')
            raise BookingIntegrityError() from e
        except SQLAlchemyError as e:
            Logger.base.exception(f'💥 [FINALIZE] Storage failure on showing {showing_id}')
            raise BookingIntegrityError() from e

        Logger.base.info(
            f'✅ [FINALIZE] {booking.booking_reference} confirmed: {len(line_items)} seat(s), '
            f'total {booking.total_amount} on showing {showing_id}'
        )
        return FinalizeResult(booking=booking)

    async def _generate_unique_reference(
        self, *, uow: AbstractUnitOfWork, now: datetime
    ) -> str:
        for _ in range(self.reference_max_attempts):
            reference = generate_booking_reference(now=now, prefix=self.reference_prefix)
            if not await uow.booking_command_repo.reference_exists(booking_reference=reference):
                return reference
            Logger.base.warning(f'🔁 [FINALIZE] Booking reference collision on {reference}')
        raise BookingIntegrityError('Could not allocate a unique booking reference')

    @staticmethod
    def _replay(
        *,
        existing: Booking,
        showing_id: UUID,
        requested: list[UUID],
        caller: Caller | None,
        holder_key: str | None,
    ) -> FinalizeResult:
        same_party = existing.is_placed_by(caller=caller, holder_key=holder_key)
        if same_party and existing.matches_intent(
            showing_id=showing_id, seat_ids=frozenset(requested)
        ):
            Logger.base.info(f'♻️ [FINALIZE] Replaying {existing.booking_reference}')
            return FinalizeResult(booking=existing, replayed=True)
        raise ConflictError(
            'Idempotency key was already used for a different booking',
            code='idempotency_key_conflict',
        )

    @staticmethod
    def _resolve_guest(
        *, caller: Caller | None, name: str | None, email: str | None, phone: str | None
    ) -> GuestInfo | None:
        if caller is not None:
            return None
        if not any((name, email, phone)):
            raise AuthenticationError('Sign in or provide guest contact details')
        return GuestInfo.create(name=name, email=email, phone=phone)

    @staticmethod
    def _validate_passenger_names(
        passenger_names: dict[UUID, str] | None, requested: list[UUID]
    ) -> dict[UUID, str]:
        names = {
            seat_id: name.strip() for seat_id, name in (passenger_names or {}).items() if name.strip()
        }
        if stray := set(names) - set(requested):
            raise ValidationError(
                f'Passenger names given for unselected seats: {", ".join(map(str, stray))}',
                field='passenger_names',
            )
        if any(len(name) > MAX_PASSENGER_NAME_LENGTH for name in names.values()):
            raise ValidationError(
                f'Passenger names must be at most {MAX_PASSENGER_NAME_LENGTH} characters',
                field='passenger_names',
            )
        return names

    @staticmethod
    def _normalize_idempotency_key(idempotency_key: str | None) -> str | None:
        if idempotency_key is None:
            return None
        idempotency_key = idempotency_key.strip()
        if not idempotency_key:
            return None
        if len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
            raise ValidationError('Idempotency key is too long', field='idempotency_key')
        return idempotency_key
