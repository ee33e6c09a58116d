from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.query.get_booking_stats_use_case import (
    GetBookingStatsUseCase,
)
from cinema_booking.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from cinema_booking.service.booking.domain.entity.booking_entity import BookingStatus
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.driving_adapter.http_controller.auth.role_auth import (
    require_admin,
)
from cinema_booking.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingDetailResponse,
    BookingStatsResponse,
)


router = APIRouter()


@router.get('/booking/stats')
@Logger.io
async def get_booking_stats(
    admin: Caller = Depends(require_admin),
    use_case: GetBookingStatsUseCase = Depends(GetBookingStatsUseCase.depends),
) -> BookingStatsResponse:
    stats = await use_case.get_stats()
    return BookingStatsResponse(
        total_bookings=stats.total_bookings,
        confirmed_bookings=stats.confirmed_bookings,
        cancelled_bookings=stats.cancelled_bookings,
        total_revenue=stats.total_revenue,
        total_refunded=stats.total_refunded,
        today_bookings=stats.today_bookings,
        today_revenue=stats.today_revenue,
    )


@router.get('/booking', response_model=List[BookingDetailResponse])
@Logger.io(truncate_content=True)
async def list_booking_history(
    booking_status: Optional[BookingStatus] = None,
    showing_id: Optional[UUID] = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    admin: Caller = Depends(require_admin),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> list[BookingDetailResponse]:
    views = await use_case.list_history(
        status=booking_status, showing_id=showing_id, limit=limit, offset=offset
    )
    return [BookingDetailResponse.from_view(view) for view in views]
