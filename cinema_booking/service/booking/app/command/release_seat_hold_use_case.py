from typing import Callable, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.database.unit_of_work import AbstractUnitOfWork
from cinema_booking.platform.logging.loguru_io import Logger


class ReleaseSeatHoldUseCase:
    def __init__(self, *, uow_factory: Callable[[], AbstractUnitOfWork]) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def release(self, *, showing_id: UUID, holder_key: str) -> int:
        """Idempotent: releasing nothing returns 0."""
        async with self.uow_factory() as uow:
            released = await uow.seat_hold_command_repo.delete_by_holder(
                showing_id=showing_id, holder_key=holder_key
            )
            await uow.commit()

        if released:
            Logger.base.info(f'🔓 [HOLD] {holder_key} released {released} seat(s) on {showing_id}')
        return released
