from datetime import timedelta
from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.exception.exceptions import BookingIntegrityError
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.platform.metrics.booking_metrics import metrics
from cinema_booking.service.booking.app.dto.hold_result import HoldResult
from cinema_booking.service.booking.app.interface.i_clock import IClock
from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold
from cinema_booking.service.booking.domain.seat_availability import find_conflicting_seats
from cinema_booking.service.booking.domain.seat_selection import (
    ensure_showing_bookable,
    resolve_requested_seats,
    validate_seat_selection,
)


class AcquireSeatHoldUseCase:
    """
    Acquire soft holds on seats during checkout (all-or-nothing)

    Flow (single transaction under the showing lock):
    1. Drop the holder's previous holds on this showing
    2. Sweep expired holds on this showing
    3. Conflict check against active holds of others and active bookings
    4. Insert one hold per seat, or none when anything conflicts
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        clock: IClock,
        hold_ttl: timedelta | None = None,
        max_seats: int | None = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.hold_ttl = hold_ttl or timedelta(minutes=settings.HOLD_TTL_MINUTES)
        self.max_seats = max_seats or settings.MAX_SEATS_PER_BOOKING
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
    async def acquire(
        self,
        *,
        showing_id: UUID,
        seat_ids: list[UUID],
        holder_key: str,
        ttl: timedelta | None = None,
    ) -> HoldResult:
        try:
            requested = validate_seat_selection(seat_ids, max_seats=self.max_seats)
        except Exception:
            metrics.record_hold(result='invalid')
            raise
        ttl = ttl or self.hold_ttl

        with self.tracer.start_as_current_span(
            'use_case.acquire_seat_hold',
            attributes={'showing.id': str(showing_id), 'seat.count': len(requested)},
        ):
            try:
                async with self.uow_factory() as uow:
                    await uow.lock_showing(showing_id=showing_id)

                    showing = ensure_showing_bookable(
                        await uow.showing_query_repo.get_showing(showing_id=showing_id)
                    )
                    resolve_requested_seats(
                        showing=showing,
                        requested=requested,
                        seats=await uow.showing_query_repo.get_seats(seat_ids=requested),
                    )

                    now = self.clock.now()
                    released = await uow.seat_hold_command_repo.delete_by_holder(
                        showing_id=showing_id, holder_key=holder_key
                    )
                    swept = await uow.seat_hold_command_repo.delete_expired(
                        now=now, showing_id=showing_id
                    )
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
                        # The holder's previous holds stay released
                        await uow.commit()
                        metrics.record_hold(result='conflict')
                        Logger.base.info(
                            f'🚫 [HOLD] {holder_key} rejected on showing {showing_id}: '
                            f'{len(conflicts)} seat(s) taken'
                        )
                        return HoldResult(accepted=False, conflicting_seats=conflicts)

                    holds = [
                        SeatHold.create(
                            showing_id=showing_id,
                            seat_id=seat_id,
                            holder_key=holder_key,
                            now=now,
                            ttl=ttl,
                        )
                        for seat_id in requested
                    ]
                    await uow.seat_hold_command_repo.create_many(holds=holds)
                    await uow.commit()
            except IntegrityError:
                # Only reachable if another writer bypassed the showing lock
                metrics.record_hold(result='conflict')
                Logger.base.warning(f'⚠️ [HOLD] Unique hold violation on showing {showing_id}')
                return HoldResult(accepted=False, conflicting_seats=requested)
            except SQLAlchemyError as e:
                metrics.record_hold(result='failed')
                Logger.base.exception(f'💥 [HOLD] Storage failure on showing {showing_id}')
                raise BookingIntegrityError('Seat hold could not be stored') from e

        metrics.record_hold(result='accepted')
        Logger.base.info(
            f'🎟️ [HOLD] {holder_key} holds {len(holds)} seat(s) on showing {showing_id} '
            f'until {now + ttl:%H:%M:%S} (released {released}, swept {swept})'
        )
        return HoldResult(accepted=True, holds=holds, expires_at=now + ttl)
