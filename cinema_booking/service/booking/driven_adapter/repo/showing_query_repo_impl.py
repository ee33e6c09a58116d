from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncContextManager, AsyncIterator, Callable, Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.interface.i_showing_query_repo import IShowingQueryRepo
from cinema_booking.service.booking.domain.entity.showing_entity import Seat, SeatCategory, Showing
from cinema_booking.service.booking.driven_adapter.model.showing_model import (
    SeatModel,
    ShowingModel,
)


class ShowingQueryRepoImpl(IShowingQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Get session for query execution.

        If session is injected (from UoW), yield it directly without context management.
        Otherwise, use session_factory context manager.
        """
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _to_showing(db_showing: ShowingModel) -> Showing:
        return Showing(
            id=db_showing.id,
            movie_ref=db_showing.movie_ref,
            screen_id=db_showing.screen_id,
            show_date=db_showing.show_date,
            show_time=db_showing.show_time,
            base_price=Decimal(db_showing.base_price),
            is_active=db_showing.is_active,
        )

    @staticmethod
    def _to_seat(db_seat: SeatModel) -> Seat:
        return Seat(
            id=db_seat.id,
            screen_id=db_seat.screen_id,
            row_label=db_seat.row_label,
            seat_number=db_seat.seat_number,
            category=SeatCategory(db_seat.category),
            price_multiplier=Decimal(db_seat.price_multiplier),
        )

    @Logger.io
    async def get_showing(self, *, showing_id: UUID) -> Showing | None:
        async with self._get_session() as session:
            db_showing = await session.get(ShowingModel, showing_id)
            return self._to_showing(db_showing) if db_showing else None

    @Logger.io(truncate_content=True)
    async def list_seats(self, *, screen_id: UUID) -> list[Seat]:
        async with self._get_session() as session:
            result = await session.execute(
                select(SeatModel)
                .where(SeatModel.screen_id == screen_id)
                .order_by(SeatModel.row_label, SeatModel.seat_number)
            )
            return [self._to_seat(db_seat) for db_seat in result.scalars().all()]

    @Logger.io
    async def get_seats(self, *, seat_ids: Iterable[UUID]) -> list[Seat]:
        seat_ids = list(seat_ids)
        if not seat_ids:
            return []
        async with self._get_session() as session:
            result = await session.execute(select(SeatModel).where(SeatModel.id.in_(seat_ids)))
            return [self._to_seat(db_seat) for db_seat in result.scalars().all()]
