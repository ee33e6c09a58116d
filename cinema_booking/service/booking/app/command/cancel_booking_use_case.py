from typing import Callable, Self
from uuid import UUID
from zoneinfo import ZoneInfo

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.exception.exceptions import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
)
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.platform.metrics.booking_metrics import metrics
from cinema_booking.service.booking.app.dto.finalize_result import CancelResult
from cinema_booking.service.booking.app.interface.i_clock import IClock
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.domain.refund_policy import RefundPolicy, quote_refund


class CancelBookingUseCase:
    """
    Cancel a confirmed booking and compute its refund

    Guards, in order: authenticated, booking exists, owner or admin, not already cancelled.
    Line items are deactivated rather than deleted, which releases the seats.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        clock: IClock,
        member_refund_policy: RefundPolicy,
        guest_refund_policy: RefundPolicy,
    ) -> None:
        self.uow_factory = uow_factory
        self.clock = clock
        self.member_refund_policy = member_refund_policy
        self.guest_refund_policy = guest_refund_policy
        self.venue_tz = ZoneInfo(settings.VENUE_TIMEZONE)
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        clock: IClock = Depends(Provide[Container.clock]),
        member_refund_policy: RefundPolicy = Depends(Provide[Container.member_refund_policy]),
        guest_refund_policy: RefundPolicy = Depends(Provide[Container.guest_refund_policy]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            clock=clock,
            member_refund_policy=member_refund_policy,
            guest_refund_policy=guest_refund_policy,
        )

    @Logger.io
    async def cancel(self, *, booking_id: UUID, caller: Caller | None) -> CancelResult:
        if caller is None:
            raise AuthenticationError()

        with self.tracer.start_as_current_span(
            'use_case.cancel_booking', attributes={'booking.id': str(booking_id)}
        ):
            async with self.uow_factory() as uow:
                booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                if booking is None:
                    raise NotFoundError('Booking not found', code='booking_not_found')
                if not (booking.is_owned_by(caller) or caller.is_admin):
                    raise ForbiddenError('Only the booking owner or an admin can cancel it')

                # Serialize with finalize/hold on the same showing, then re-read
                await uow.lock_showing(showing_id=booking.showing_id)
                booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                if booking is None:
                    raise NotFoundError('Booking not found', code='booking_not_found')
                booking.validate_can_be_cancelled()

                showing = await uow.showing_query_repo.get_showing(showing_id=booking.showing_id)
                if showing is None:
                    raise NotFoundError('Showing not found', code='showing_not_found')

                now = self.clock.now()
                hours_until_showing = (
                    showing.starts_at(tz=self.venue_tz) - now
                ).total_seconds() / 3600
                policy = self.guest_refund_policy if booking.is_guest else self.member_refund_policy
                quote = quote_refund(
                    booking.total_amount, hours_until_showing, policy, currency=settings.CURRENCY
                )

                cancelled = booking.cancel(now=now, refund_amount=quote.refund_amount)
                await uow.booking_command_repo.update_cancelled(booking=cancelled)
                await uow.commit()

        metrics.record_cancellation(refund=quote.outcome.value)
        Logger.base.info(
            f'↩️ [CANCEL] {cancelled.booking_reference} cancelled by {caller.user_id} '
            f'({hours_until_showing:.1f}h before show, {policy.name}): refund {quote.refund_amount}'
        )
        return CancelResult(booking=cancelled, quote=quote)
