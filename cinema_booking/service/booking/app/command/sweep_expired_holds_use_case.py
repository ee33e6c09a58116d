from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.platform.metrics.booking_metrics import metrics
from cinema_booking.service.booking.app.interface.i_clock import IClock


class SweepExpiredHoldsUseCase:
    """
    Hygiene only: expired holds are already ignored by every read, so sweeping
    never changes an availability decision.
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

    @Logger.io
    async def sweep(self) -> int:
        async with self.uow_factory() as uow:
            removed = await uow.seat_hold_command_repo.delete_expired(now=self.clock.now())
            await uow.commit()

        metrics.holds_swept.inc(removed)
        Logger.base.info(f'🧹 [SWEEP] Removed {removed} expired hold(s)')
        return removed
