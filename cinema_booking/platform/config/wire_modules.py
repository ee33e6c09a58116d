"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from cinema_booking.service.booking.app.command import (
    acquire_seat_hold_use_case,
    cancel_booking_use_case,
    finalize_booking_use_case,
    release_seat_hold_use_case,
    sweep_expired_holds_use_case,
)
from cinema_booking.service.booking.app.query import (
    find_booking_use_case,
    get_booking_stats_use_case,
    get_seat_availability_use_case,
    list_bookings_use_case,
)
from cinema_booking.service.booking.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    acquire_seat_hold_use_case,
    release_seat_hold_use_case,
    sweep_expired_holds_use_case,
    finalize_booking_use_case,
    cancel_booking_use_case,
    get_seat_availability_use_case,
    find_booking_use_case,
    list_bookings_use_case,
    get_booking_stats_use_case,
    role_auth,
]
