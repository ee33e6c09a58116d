from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.exception.exceptions import (
    BookingIntegrityError,
    ForbiddenError,
    NotFoundError,
)
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.dto.booking_view import BookingView
from cinema_booking.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.domain.value_object.booking_reference import (
    is_valid_booking_reference,
    normalize_booking_reference,
)


class FindBookingUseCase:
    """
    Booking lookup for customers and guests.

    Whoever holds a booking reference may view that booking, contact details included.
    Bookings found by idempotency key are restricted to the party that placed them
    (member by user id, guest by session key) and admins. A guest booking looked up
    from another session reads as missing.
    """

    def __init__(self, *, booking_query_repo: IBookingQueryRepo) -> None:
        self.booking_query_repo = booking_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo)

    @Logger.io
    async def find_by_reference(self, *, booking_reference: str) -> BookingView:
        code = normalize_booking_reference(booking_reference)
        if not is_valid_booking_reference(code):
            raise NotFoundError('Booking not found', code='booking_not_found')

        views = await self.booking_query_repo.find_by_reference(booking_reference=code)
        if not views:
            raise NotFoundError('Booking not found', code='booking_not_found')
        if len(views) > 1:
            Logger.base.critical(f'💥 [LOOKUP] {len(views)} bookings share reference {code}')
            raise BookingIntegrityError('Booking reference is ambiguous')
        return views[0]

    @Logger.io
    async def find_by_idempotency_key(
        self, *, idempotency_key: str, caller: Caller | None, holder_key: str | None = None
    ) -> BookingView:
        view = await self.booking_query_repo.get_view_by_idempotency_key(
            idempotency_key=idempotency_key.strip()
        )
        if view is None:
            raise NotFoundError('Booking not found', code='booking_not_found')
        if caller is not None and caller.is_admin:
            return view
        if view.user_id is not None:
            if caller is None or caller.user_id != view.user_id:
                raise ForbiddenError('Booking belongs to another customer')
            return view
        if caller is not None or not view.holder_key or view.holder_key != holder_key:
            raise NotFoundError('Booking not found', code='booking_not_found')
        return view
