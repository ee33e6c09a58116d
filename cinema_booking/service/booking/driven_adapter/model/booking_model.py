from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Index, Numeric, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cinema_booking.platform.database.orm_db_setting import Base
from cinema_booking.platform.types.utc_datetime_type import UtcDateTime


class BookingModel(Base):
    __tablename__ = 'booking'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    user_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True, index=True)
    guest_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    showing_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('showing.id'), nullable=False, index=True
    )
    booking_reference: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default='confirmed')
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, unique=True
    )
    holder_key: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, index=True)
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UtcDateTime, nullable=True)
    refund_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    seats: Mapped[list['BookingSeatModel']] = relationship(
        'BookingSeatModel',
        back_populates='booking',
        lazy='selectin',
        order_by='BookingSeatModel.seat_label',
    )


class BookingSeatModel(Base):
    __tablename__ = 'booking_seat'
    __table_args__ = (
        # Last line of defence against a double sale if the showing lock is ever bypassed
        Index(
            'uq_booking_seat_active',
            'showing_id',
            'seat_id',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active'),
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    booking_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('booking.id'), nullable=False, index=True
    )
    showing_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('showing.id'), nullable=False)
    seat_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('seat.id'), nullable=False)
    seat_label: Mapped[str] = mapped_column(String(10), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    passenger_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    booking: Mapped[BookingModel] = relationship('BookingModel', back_populates='seats')
