"""
Booking Command Repository Implementation

Runs on the unit of work's session. Line items carry the showing id so that the partial
unique index on (showing_id, seat_id) WHERE is_active can reject a double sale.
"""

from decimal import Decimal
from typing import Iterable
from uuid import UUID

from sqlalchemy import exists, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils.compat import uuid7

from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.interface.i_booking_command_repo import (
    IBookingCommandRepo,
)
from cinema_booking.service.booking.domain.entity.booking_entity import (
    Booking,
    BookingSeat,
    BookingStatus,
    GuestInfo,
)
from cinema_booking.service.booking.domain.entity.showing_entity import SeatCategory
from cinema_booking.service.booking.driven_adapter.model.booking_model import (
    BookingModel,
    BookingSeatModel,
)


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, *, session: AsyncSession):
        self.session = session

    @staticmethod
    def to_entity(db_booking: BookingModel) -> Booking:
        """Convert BookingModel (with its line items loaded) to Booking entity"""
        guest = None
        if db_booking.guest_name and db_booking.guest_email:
            guest = GuestInfo(
                name=db_booking.guest_name,
                email=db_booking.guest_email,
                phone=db_booking.guest_phone,
            )
        return Booking(
            id=db_booking.id,
            showing_id=db_booking.showing_id,
            booking_reference=db_booking.booking_reference,
            total_amount=Decimal(db_booking.total_amount),
            seats=[
                BookingSeat(
                    seat_id=db_seat.seat_id,
                    seat_label=db_seat.seat_label,
                    category=SeatCategory(db_seat.category),
                    price=Decimal(db_seat.price),
                    passenger_name=db_seat.passenger_name,
                    is_active=db_seat.is_active,
                )
                for db_seat in db_booking.seats
            ],
            status=BookingStatus(db_booking.status),
            user_id=db_booking.user_id,
            guest=guest,
            idempotency_key=db_booking.idempotency_key,
            holder_key=db_booking.holder_key,
            created_at=db_booking.created_at,
            cancelled_at=db_booking.cancelled_at,
            refund_amount=(
                Decimal(db_booking.refund_amount) if db_booking.refund_amount is not None else None
            ),
        )

    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        # populate_existing: callers re-read after taking the showing lock
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == booking_id)
            .execution_options(populate_existing=True)
        )
        db_booking = result.scalar_one_or_none()
        return self.to_entity(db_booking) if db_booking else None

    @Logger.io
    async def get_by_idempotency_key(self, *, idempotency_key: str) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel).where(BookingModel.idempotency_key == idempotency_key)
        )
        db_booking = result.scalar_one_or_none()
        return self.to_entity(db_booking) if db_booking else None

    @Logger.io
    async def list_booked_seat_ids(
        self, *, showing_id: UUID, seat_ids: Iterable[UUID] | None = None
    ) -> set[UUID]:
        stmt = select(BookingSeatModel.seat_id).where(
            BookingSeatModel.showing_id == showing_id,
            BookingSeatModel.is_active.is_(True),
        )
        if seat_ids is not None:
            stmt = stmt.where(BookingSeatModel.seat_id.in_(list(seat_ids)))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    @Logger.io
    async def reference_exists(self, *, booking_reference: str) -> bool:
        result = await self.session.execute(
            select(exists().where(BookingModel.booking_reference == booking_reference))
        )
        return bool(result.scalar())

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        db_booking = BookingModel(
            id=booking.id,
            user_id=booking.user_id,
            guest_name=booking.guest.name if booking.guest else None,
            guest_email=booking.guest.email if booking.guest else None,
            guest_phone=booking.guest.phone if booking.guest else None,
            showing_id=booking.showing_id,
            booking_reference=booking.booking_reference,
            total_amount=booking.total_amount,
            status=booking.status.value,
            idempotency_key=booking.idempotency_key,
            holder_key=booking.holder_key,
            created_at=booking.created_at,
        )
        db_booking.seats = [
            BookingSeatModel(
                id=uuid7(),
                showing_id=booking.showing_id,
                seat_id=seat.seat_id,
                seat_label=seat.seat_label,
                category=seat.category.value,
                price=seat.price,
                passenger_name=seat.passenger_name,
                is_active=seat.is_active,
            )
            for seat in booking.seats
        ]
        self.session.add(db_booking)
        # Header and line items go out in one flush; a unique violation surfaces here
        await self.session.flush()
        return booking

    @Logger.io
    async def update_cancelled(self, *, booking: Booking) -> Booking:
        await self.session.execute(
            update(BookingModel)
            .where(BookingModel.id == booking.id)
            .values(
                status=booking.status.value,
                cancelled_at=booking.cancelled_at,
                refund_amount=booking.refund_amount,
            )
        )
        await self.session.execute(
            update(BookingSeatModel)
            .where(BookingSeatModel.booking_id == booking.id)
            .values(is_active=False)
        )
        return booking
