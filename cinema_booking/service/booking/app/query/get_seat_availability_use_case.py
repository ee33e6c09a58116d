from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.interface.i_clock import IClock
from cinema_booking.service.booking.domain.entity.showing_entity import Showing
from cinema_booking.service.booking.domain.seat_availability import (
    SeatAvailability,
    build_availability,
)
from cinema_booking.service.booking.domain.seat_selection import ensure_showing_bookable


class GetSeatAvailabilityUseCase:
    """
    Snapshot of a showing's seat map. Advisory only: hold and finalize re-check
    availability inside their own transaction.
    """

    def __init__(self, *, uow_factory: Callable[[], AbstractUnitOfWork], clock: IClock) -> None:
        self.uow_factory = uow_factory
        self.clock = clock

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

    @Logger.io(truncate_content=True)
    async def get_availability(
        self, *, showing_id: UUID, viewer_holder_key: str | None = None
    ) -> tuple[Showing, list[SeatAvailability]]:
        async with self.uow_factory() as uow:
            showing = ensure_showing_bookable(
                await uow.showing_query_repo.get_showing(showing_id=showing_id)
            )
            now = self.clock.now()
            seats = await uow.showing_query_repo.list_seats(screen_id=showing.screen_id)
            booked = await uow.booking_command_repo.list_booked_seat_ids(showing_id=showing_id)
            holds = await uow.seat_hold_command_repo.list_active(showing_id=showing_id, now=now)

        return showing, build_availability(
            showing=showing,
            seats=seats,
            booked_seat_ids=booked,
            holds=holds,
            now=now,
            viewer_holder_key=viewer_holder_key,
        )
