from datetime import timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from cinema_booking.platform.exception.exceptions import SeatsUnavailableError
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.command.acquire_seat_hold_use_case import (
    AcquireSeatHoldUseCase,
)
from cinema_booking.service.booking.app.command.release_seat_hold_use_case import (
    ReleaseSeatHoldUseCase,
)
from cinema_booking.service.booking.app.query.get_seat_availability_use_case import (
    GetSeatAvailabilityUseCase,
)
from cinema_booking.service.booking.driving_adapter.http_controller.auth.role_auth import (
    get_holder_key,
    require_holder_key,
)
from cinema_booking.service.booking.driving_adapter.http_controller.schema.showing_schema import (
    SeatAvailabilityResponse,
    SeatHoldReleaseResponse,
    SeatHoldRequest,
    SeatHoldResponse,
    ShowingAvailabilityResponse,
)

router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.get('/{showing_id}/availability')
@Logger.io(truncate_content=True)
async def get_seat_availability(
    showing_id: UUID,
    holder_key: str | None = Depends(get_holder_key),
    use_case: GetSeatAvailabilityUseCase = Depends(GetSeatAvailabilityUseCase.depends),
) -> ShowingAvailabilityResponse:
    showing, seats = await use_case.get_availability(
        showing_id=showing_id, viewer_holder_key=holder_key
    )
    return ShowingAvailabilityResponse(
        showing_id=showing.id,
        movie_ref=showing.movie_ref,
        show_date=showing.show_date,
        show_time=showing.show_time,
        base_price=showing.base_price,
        available_count=sum(1 for seat in seats if seat.available),
        seats=[
            SeatAvailabilityResponse(
                seat_id=entry.seat.id,
                label=entry.seat.label,
                row_label=entry.seat.row_label,
                seat_number=entry.seat.seat_number,
                category=entry.seat.category.value,
                price=entry.price,
                status=entry.status.value,
                available=entry.available,
                held_by_viewer=entry.held_by_viewer,
            )
            for entry in seats
        ],
    )


@router.post('/{showing_id}/hold', status_code=status.HTTP_201_CREATED)
@Logger.io
async def hold_seats(
    showing_id: UUID,
    request: SeatHoldRequest,
    holder_key: str = Depends(require_holder_key),
    use_case: AcquireSeatHoldUseCase = Depends(AcquireSeatHoldUseCase.depends),
) -> SeatHoldResponse:
    with tracer.start_as_current_span('controller.hold_seats') as span:
        span.set_attribute('showing.id', str(showing_id))
        span.set_attribute('seat.count', len(request.seat_ids))

        result = await use_case.acquire(
            showing_id=showing_id,
            seat_ids=request.seat_ids,
            holder_key=holder_key,
            ttl=timedelta(minutes=request.ttl_minutes) if request.ttl_minutes else None,
        )
        if not result.accepted:
            raise SeatsUnavailableError(result.conflicting_seats)

        return SeatHoldResponse(
            accepted=True,
            seat_ids=[hold.seat_id for hold in result.holds],
            expires_at=result.expires_at,
        )


@router.delete('/{showing_id}/hold')
@Logger.io
async def release_seats(
    showing_id: UUID,
    holder_key: str = Depends(require_holder_key),
    use_case: ReleaseSeatHoldUseCase = Depends(ReleaseSeatHoldUseCase.depends),
) -> SeatHoldReleaseResponse:
    released = await use_case.release(showing_id=showing_id, holder_key=holder_key)
    return SeatHoldReleaseResponse(released=released)
