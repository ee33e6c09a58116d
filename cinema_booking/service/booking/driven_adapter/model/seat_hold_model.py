from datetime import datetime
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cinema_booking.platform.database.orm_db_setting import Base
from cinema_booking.platform.types.utc_datetime_type import UtcDateTime


class SeatHoldModel(Base):
    __tablename__ = 'seat_hold'
    __table_args__ = (
        UniqueConstraint('showing_id', 'seat_id', name='uq_seat_hold_showing_seat'),
        Index('ix_seat_hold_showing_holder', 'showing_id', 'holder_key'),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)  # UUID7
    showing_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('showing.id'), nullable=False)
    seat_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey('seat.id'), nullable=False)
    holder_key: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UtcDateTime, nullable=False, index=True)
