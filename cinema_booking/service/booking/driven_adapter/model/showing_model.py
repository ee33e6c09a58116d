from datetime import date, time
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Time, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cinema_booking.platform.database.orm_db_setting import Base


class ScreenModel(Base):
    __tablename__ = 'screen'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    theater_name: Mapped[str] = mapped_column(String(255), nullable=False)


class SeatModel(Base):
    __tablename__ = 'seat'
    __table_args__ = (
        UniqueConstraint('screen_id', 'row_label', 'seat_number', name='uq_seat_screen_position'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    screen_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('screen.id'), nullable=False, index=True
    )
    row_label: Mapped[str] = mapped_column(String(5), nullable=False)
    seat_number: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default='regular')
    price_multiplier: Mapped[Decimal] = mapped_column(
        Numeric(4, 2), nullable=False, default=Decimal('1.00')
    )


class ShowingModel(Base):
    __tablename__ = 'showing'

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    movie_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    screen_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey('screen.id'), nullable=False, index=True
    )
    show_date: Mapped[date] = mapped_column(Date, nullable=False)
    show_time: Mapped[time] = mapped_column(Time, nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
