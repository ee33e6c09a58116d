"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from cinema_booking.service.booking.driven_adapter.model.booking_model import (
    BookingModel,
    BookingSeatModel,
)
from cinema_booking.service.booking.driven_adapter.model.profile_model import ProfileModel
from cinema_booking.service.booking.driven_adapter.model.seat_hold_model import SeatHoldModel
from cinema_booking.service.booking.driven_adapter.model.showing_model import (
    ScreenModel,
    SeatModel,
    ShowingModel,
)

__all__ = [
    'BookingModel',
    'BookingSeatModel',
    'ProfileModel',
    'ScreenModel',
    'SeatHoldModel',
    'SeatModel',
    'ShowingModel',
]
