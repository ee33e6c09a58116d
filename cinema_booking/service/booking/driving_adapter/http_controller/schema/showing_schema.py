from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SeatAvailabilityResponse(BaseModel):
    seat_id: UUID
    label: str
    row_label: str
    seat_number: int
    category: str
    price: Decimal
    status: str  # available / held / booked
    available: bool
    held_by_viewer: bool = False


class ShowingAvailabilityResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'showing_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'movie_ref': 'tt1375666',
                'show_date': '2025-01-14',
                'show_time': '19:30:00',
                'base_price': '800.00',
                'available_count': 118,
                'seats': [
                    {
                        'seat_id': '01936d8f-6a10-7000-8000-000000000001',
                        'label': 'A1',
                        'row_label': 'A',
                        'seat_number': 1,
                        'category': 'regular',
                        'price': '800.00',
                        'status': 'available',
                        'available': True,
                        'held_by_viewer': False,
                    }
                ],
            }
        }
    }

    showing_id: UUID
    movie_ref: str
    show_date: date
    show_time: time
    base_price: Decimal
    available_count: int
    seats: List[SeatAvailabilityResponse]


class SeatHoldRequest(BaseModel):
    seat_ids: List[UUID]
    ttl_minutes: Optional[int] = Field(default=None, ge=1, le=30)

    model_config = {
        'json_schema_extra': {
            'example': {'seat_ids': ['01936d8f-6a10-7000-8000-000000000001'], 'ttl_minutes': 10}
        }
    }


class SeatHoldResponse(BaseModel):
    accepted: bool
    seat_ids: List[UUID]
    expires_at: Optional[datetime] = None


class SeatHoldReleaseResponse(BaseModel):
    released: int
