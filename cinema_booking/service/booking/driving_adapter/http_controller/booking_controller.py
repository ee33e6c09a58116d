from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Response, status
from opentelemetry import trace

from cinema_booking.platform.constant.route_constant import IDEMPOTENCY_KEY_HEADER
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.command.cancel_booking_use_case import (
    CancelBookingUseCase,
)
from cinema_booking.service.booking.app.command.finalize_booking_use_case import (
    FinalizeBookingUseCase,
)
from cinema_booking.service.booking.app.query.find_booking_use_case import FindBookingUseCase
from cinema_booking.service.booking.app.query.list_bookings_use_case import ListBookingsUseCase
from cinema_booking.service.booking.domain.entity.booking_entity import Booking, BookingStatus
from cinema_booking.service.booking.domain.entity.caller_entity import Caller
from cinema_booking.service.booking.driving_adapter.http_controller.auth.role_auth import (
    get_current_caller,
    get_holder_key,
    get_optional_caller,
)
from cinema_booking.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingCancelResponse,
    BookingDetailResponse,
    BookingFinalizeRequest,
    BookingFinalizeResponse,
    BookingSeatResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _seat_responses(booking: Booking) -> list[BookingSeatResponse]:
    return [
        BookingSeatResponse(
            seat_id=seat.seat_id,
            seat_label=seat.seat_label,
            category=seat.category.value,
            price=seat.price,
            passenger_name=seat.passenger_name,
            is_active=seat.is_active,
        )
        for seat in booking.seats
    ]


@router.get('/my_booking', response_model=List[BookingDetailResponse])
@Logger.io(truncate_content=True)
async def list_my_bookings(
    booking_status: Optional[BookingStatus] = None,
    caller: Caller = Depends(get_current_caller),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> list[BookingDetailResponse]:
    views = await use_case.list_my_bookings(user_id=caller.user_id, status=booking_status)
    return [BookingDetailResponse.from_view(view) for view in views]


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def finalize_booking(
    request: BookingFinalizeRequest,
    response: Response,
    idempotency_key: Optional[str] = Header(default=None, alias=IDEMPOTENCY_KEY_HEADER),
    caller: Caller | None = Depends(get_optional_caller),
    holder_key: str | None = Depends(get_holder_key),
    use_case: FinalizeBookingUseCase = Depends(FinalizeBookingUseCase.depends),
) -> BookingFinalizeResponse:
    with tracer.start_as_current_span('controller.finalize_booking') as span:
        span.set_attribute('showing.id', str(request.showing_id))
        span.set_attribute('seat.count', len(request.seat_ids))
        span.set_attribute('caller.kind', 'member' if caller else 'guest')

        result = await use_case.finalize(
            showing_id=request.showing_id,
            seat_ids=request.seat_ids,
            total_amount=request.total_amount,
            caller=caller,
            guest_name=request.guest_name,
            guest_email=request.guest_email,
            guest_phone=request.guest_phone,
            holder_key=holder_key,
            passenger_names=request.passenger_names or None,
            idempotency_key=idempotency_key,
        )

        # A replay returns the booking created by the first request
        if result.replayed:
            response.status_code = status.HTTP_200_OK

        span.set_attribute('booking.id', str(result.booking_id))
        booking = result.booking
        return BookingFinalizeResponse(
            booking_id=booking.id,
            booking_reference=booking.booking_reference,
            status=booking.status.value,
            total_amount=booking.total_amount,
            replayed=result.replayed,
            seats=_seat_responses(booking),
            created_at=booking.created_at,
        )


@router.patch('/{booking_id}/cancel')
@Logger.io
async def cancel_booking(
    booking_id: UUID,
    caller: Caller = Depends(get_current_caller),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> BookingCancelResponse:
    result = await use_case.cancel(booking_id=booking_id, caller=caller)
    return BookingCancelResponse(
        booking_id=result.booking.id,
        booking_reference=result.booking.booking_reference,
        status=result.booking.status.value,
        refund_amount=result.quote.refund_amount,
        cancellation_fee=result.quote.cancellation_fee,
        message=result.quote.message,
        cancelled_at=result.booking.cancelled_at,
    )


@router.get('/reference/{reference}')
@Logger.io
async def get_booking_by_reference(
    reference: str,
    use_case: FindBookingUseCase = Depends(FindBookingUseCase.depends),
) -> BookingDetailResponse:
    view = await use_case.find_by_reference(booking_reference=reference)
    return BookingDetailResponse.from_view(view)


@router.get('/idempotency/{idempotency_key}')
@Logger.io
async def get_booking_by_idempotency_key(
    idempotency_key: str,
    caller: Caller | None = Depends(get_optional_caller),
    holder_key: str | None = Depends(get_holder_key),
    use_case: FindBookingUseCase = Depends(FindBookingUseCase.depends),
) -> BookingDetailResponse:
    view = await use_case.find_by_idempotency_key(
        idempotency_key=idempotency_key, caller=caller, holder_key=holder_key
    )
    return BookingDetailResponse.from_view(view)
