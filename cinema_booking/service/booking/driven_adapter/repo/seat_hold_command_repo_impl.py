from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.interface.i_seat_hold_command_repo import (
    ISeatHoldCommandRepo,
)
from cinema_booking.service.booking.domain.entity.seat_hold_entity import SeatHold
from cinema_booking.service.booking.driven_adapter.model.seat_hold_model import SeatHoldModel


class SeatHoldCommandRepoImpl(ISeatHoldCommandRepo):
    """Operates on the session of the enclosing unit of work; never commits."""

    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(db_hold: SeatHoldModel) -> SeatHold:
        return SeatHold(
            id=db_hold.id,
            showing_id=db_hold.showing_id,
            seat_id=db_hold.seat_id,
            holder_key=db_hold.holder_key,
            created_at=db_hold.created_at,
            expires_at=db_hold.expires_at,
        )

    @Logger.io
    async def list_active(self, *, showing_id: UUID, now: datetime) -> list[SeatHold]:
        result = await self.session.execute(
            select(SeatHoldModel).where(
                SeatHoldModel.showing_id == showing_id,
                SeatHoldModel.expires_at > now,
            )
        )
        return [self._to_entity(db_hold) for db_hold in result.scalars().all()]

    @Logger.io
    async def delete_by_holder(self, *, showing_id: UUID, holder_key: str) -> int:
        result = await self.session.execute(
            delete(SeatHoldModel).where(
                SeatHoldModel.showing_id == showing_id,
                SeatHoldModel.holder_key == holder_key,
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]

    @Logger.io
    async def delete_expired(self, *, now: datetime, showing_id: UUID | None = None) -> int:
        stmt = delete(SeatHoldModel).where(SeatHoldModel.expires_at <= now)
        if showing_id is not None:
            stmt = stmt.where(SeatHoldModel.showing_id == showing_id)
        result = await self.session.execute(stmt)
        return result.rowcount or 0  # type: ignore[attr-defined]

    @Logger.io
    async def create_many(self, *, holds: list[SeatHold]) -> list[SeatHold]:
        self.session.add_all(
            SeatHoldModel(
                id=hold.id,
                showing_id=hold.showing_id,
                seat_id=hold.seat_id,
                holder_key=hold.holder_key,
                created_at=hold.created_at,
                expires_at=hold.expires_at,
            )
            for hold in holds
        )
        await self.session.flush()
        return holds
