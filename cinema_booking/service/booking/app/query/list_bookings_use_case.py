from typing import Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.dto.booking_view import BookingView
from cinema_booking.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from cinema_booking.service.booking.domain.entity.booking_entity import BookingStatus


class ListBookingsUseCase:
    def __init__(self, *, booking_query_repo: IBookingQueryRepo):
        self.booking_query_repo = booking_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo)

    @Logger.io(truncate_content=True)
    async def list_my_bookings(
        self, *, user_id: UUID, status: BookingStatus | None = None
    ) -> list[BookingView]:
        return await self.booking_query_repo.list_by_user(user_id=user_id, status=status)

    @Logger.io(truncate_content=True)
    async def list_history(
        self,
        *,
        status: BookingStatus | None = None,
        showing_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[BookingView]:
        return await self.booking_query_repo.list_history(
            status=status, showing_id=showing_id, limit=limit, offset=offset
        )
