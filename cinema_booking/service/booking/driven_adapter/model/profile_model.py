from uuid import UUID

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cinema_booking.platform.database.orm_db_setting import Base


class ProfileModel(Base):
    """Owned by the identity service; read here only for display names."""

    __tablename__ = 'profile'

    user_id: Mapped[UUID] = mapped_column(Uuid, primary_key=True)
    full_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
