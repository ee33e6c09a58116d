from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from cinema_booking.service.booking.app.dto.booking_view import BookingView
from cinema_booking.service.booking.domain.entity.booking_entity import (
    MAX_GUEST_EMAIL_LENGTH,
    MAX_GUEST_NAME_LENGTH,
    MAX_GUEST_PHONE_LENGTH,
    MAX_PASSENGER_NAME_LENGTH,
)


class BookingFinalizeRequest(BaseModel):
    showing_id: UUID
    seat_ids: List[UUID]
    total_amount: Decimal = Field(ge=0)
    guest_name: Optional[str] = Field(default=None, max_length=MAX_GUEST_NAME_LENGTH)
    guest_email: Optional[str] = Field(default=None, max_length=MAX_GUEST_EMAIL_LENGTH)
    guest_phone: Optional[str] = Field(default=None, max_length=MAX_GUEST_PHONE_LENGTH)
    passenger_names: Dict[UUID, Annotated[str, Field(max_length=MAX_PASSENGER_NAME_LENGTH)]] = {}

    model_config = {
        'json_schema_extra': {
            'examples': [
                {
                    'showing_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                    'seat_ids': ['01936d8f-6a10-7000-8000-000000000001'],
                    'total_amount': '800.00',
                },
                {
                    'showing_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                    'seat_ids': ['01936d8f-6a10-7000-8000-000000000001'],
                    'total_amount': '800.00',
                    'guest_name': 'Ayesha Khan',
                    'guest_email': 'ayesha@example.com',
                    'guest_phone': '+92 300 1234567',
                },
            ]
        }
    }


class BookingSeatResponse(BaseModel):
    seat_id: UUID
    seat_label: str
    category: str
    price: Decimal
    passenger_name: Optional[str] = None
    is_active: bool


class BookingFinalizeResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-7b00-7000-8000-00000000beef',  # UUID7
                'booking_reference': 'BK20250114-7QK2ZD',
                'status': 'confirmed',
                'total_amount': '800.00',
                'replayed': False,
            }
        },
    }

    booking_id: UUID
    booking_reference: str
    status: str
    total_amount: Decimal
    replayed: bool
    seats: List[BookingSeatResponse]
    created_at: Optional[datetime] = None


class BookingCancelResponse(BaseModel):
    booking_id: UUID
    booking_reference: str
    status: str
    refund_amount: Decimal
    cancellation_fee: Decimal
    message: str
    cancelled_at: Optional[datetime] = None


class BookingDetailResponse(BaseModel):
    id: UUID
    booking_reference: str
    status: str
    showing_id: UUID
    movie_ref: str
    screen_id: UUID
    show_date: date
    show_time: time
    seats: List[BookingSeatResponse]
    total_amount: Decimal
    created_at: datetime
    customer_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    refund_amount: Optional[Decimal] = None

    @classmethod
    def from_view(cls, view: BookingView) -> 'BookingDetailResponse':
        return cls(
            id=view.id,
            booking_reference=view.booking_reference,
            status=view.status.value,
            showing_id=view.showing_id,
            movie_ref=view.movie_ref,
            screen_id=view.screen_id,
            show_date=view.show_date,
            show_time=view.show_time,
            seats=[
                BookingSeatResponse(
                    seat_id=seat.seat_id,
                    seat_label=seat.seat_label,
                    category=seat.category.value,
                    price=seat.price,
                    passenger_name=seat.passenger_name,
                    is_active=seat.is_active,
                )
                for seat in view.seats
            ],
            total_amount=view.total_amount,
            created_at=view.created_at,
            customer_name=view.customer_name,
            guest_email=view.guest_email,
            guest_phone=view.guest_phone,
            cancelled_at=view.cancelled_at,
            refund_amount=view.refund_amount,
        )


class BookingStatsResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'total_bookings': 42,
                'confirmed_bookings': 38,
                'cancelled_bookings': 4,
                'total_revenue': '30400.00',
                'total_refunded': '2400.00',
                'today_bookings': 5,
                'today_revenue': '4000.00',
            }
        }
    }

    total_bookings: int
    confirmed_bookings: int
    cancelled_bookings: int
    total_revenue: Decimal
    total_refunded: Decimal
    today_bookings: int
    today_revenue: Decimal
