from contextlib import asynccontextmanager
from datetime import datetime
from decimal import Decimal
from typing import Any, AsyncContextManager, AsyncIterator, Callable
from uuid import UUID

from sqlalchemy import Select, case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.dto.booking_view import BookingStats, BookingView
from cinema_booking.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from cinema_booking.service.booking.domain.entity.booking_entity import BookingStatus
from cinema_booking.service.booking.domain.value_object.money import to_money
from cinema_booking.service.booking.driven_adapter.model.booking_model import BookingModel
from cinema_booking.service.booking.driven_adapter.model.profile_model import ProfileModel
from cinema_booking.service.booking.driven_adapter.model.showing_model import ShowingModel
from cinema_booking.service.booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)


class BookingQueryRepoImpl(IBookingQueryRepo):
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
    def _view_query() -> Select[Any]:
        return (
            select(BookingModel, ShowingModel, ProfileModel.full_name)
            .join(ShowingModel, ShowingModel.id == BookingModel.showing_id)
            .outerjoin(ProfileModel, ProfileModel.user_id == BookingModel.user_id)
        )

    @staticmethod
    def _to_view(db_booking: BookingModel, db_showing: ShowingModel, full_name: str | None) -> BookingView:
        """
        Project a booking row for display

        Note:
        - customer_name prefers the member profile, falling back to the guest-supplied name
        """
        booking = BookingCommandRepoImpl.to_entity(db_booking)
        return BookingView(
            id=booking.id,
            booking_reference=booking.booking_reference,
            status=booking.status,
            showing_id=db_showing.id,
            movie_ref=db_showing.movie_ref,
            screen_id=db_showing.screen_id,
            show_date=db_showing.show_date,
            show_time=db_showing.show_time,
            seats=booking.seats,
            total_amount=booking.total_amount,
            created_at=booking.created_at,  # type: ignore[arg-type]
            user_id=booking.user_id,
            customer_name=full_name or db_booking.guest_name,
            guest_email=db_booking.guest_email,
            guest_phone=db_booking.guest_phone,
            idempotency_key=booking.idempotency_key,
            holder_key=booking.holder_key,
            cancelled_at=booking.cancelled_at,
            refund_amount=booking.refund_amount,
        )

    async def _fetch_views(self, stmt: Select[Any]) -> list[BookingView]:
        async with self._get_session() as session:
            result = await session.execute(stmt)
            return [self._to_view(*row) for row in result.all()]

    @Logger.io
    async def find_by_reference(self, *, booking_reference: str) -> list[BookingView]:
        return await self._fetch_views(
            self._view_query().where(BookingModel.booking_reference == booking_reference)
        )

    @Logger.io
    async def get_view_by_id(self, *, booking_id: UUID) -> BookingView | None:
        views = await self._fetch_views(self._view_query().where(BookingModel.id == booking_id))
        return views[0] if views else None

    @Logger.io
    async def get_view_by_idempotency_key(self, *, idempotency_key: str) -> BookingView | None:
        views = await self._fetch_views(
            self._view_query().where(BookingModel.idempotency_key == idempotency_key)
        )
        return views[0] if views else None

    @Logger.io
    async def list_by_user(
        self, *, user_id: UUID, status: BookingStatus | None = None
    ) -> list[BookingView]:
        stmt = self._view_query().where(BookingModel.user_id == user_id)
        if status:
            stmt = stmt.where(BookingModel.status == status.value)
        return await self._fetch_views(
            stmt.order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        )

    @Logger.io
    async def list_history(
        self,
        *,
        status: BookingStatus | None = None,
        showing_id: UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[BookingView]:
        stmt = self._view_query()
        if status:
            stmt = stmt.where(BookingModel.status == status.value)
        if showing_id:
            stmt = stmt.where(BookingModel.showing_id == showing_id)
        return await self._fetch_views(
            stmt.order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
            .limit(limit)
            .offset(offset)
        )

    @Logger.io
    async def get_stats(self, *, day_start: datetime, day_end: datetime) -> BookingStats:
        is_confirmed = BookingModel.status == BookingStatus.CONFIRMED.value
        is_today = (BookingModel.created_at >= day_start) & (BookingModel.created_at < day_end)

        async with self._get_session() as session:
            result = await session.execute(
                select(
                    func.count(BookingModel.id),
                    func.count(case((is_confirmed, 1))),
                    func.count(case((BookingModel.status == BookingStatus.CANCELLED.value, 1))),
                    func.coalesce(func.sum(case((is_confirmed, BookingModel.total_amount))), 0),
                    func.coalesce(func.sum(BookingModel.refund_amount), 0),
                    func.count(case((is_today, 1))),
                    func.coalesce(
                        func.sum(case((is_today & is_confirmed, BookingModel.total_amount))), 0
                    ),
                )
            )
            (
                total,
                confirmed,
                cancelled,
                revenue,
                refunded,
                today_count,
                today_revenue,
            ) = result.one()

        return BookingStats(
            total_bookings=total,
            confirmed_bookings=confirmed,
            cancelled_bookings=cancelled,
            total_revenue=to_money(Decimal(str(revenue))),
            total_refunded=to_money(Decimal(str(refunded))),
            today_bookings=today_count,
            today_revenue=to_money(Decimal(str(today_revenue))),
        )
