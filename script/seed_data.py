#!/usr/bin/env python3
"""
Database Seed Script
Populate demo catalog data into the database

Features:
1. Create Screen - One screen with rows A-J x 12 seats
   (A-E regular, F-H premium x1.25, I-J vip x1.5)
2. Create Showings - Three upcoming showings on that screen
3. Create Profiles - A demo customer and admin, printed with bearer tokens

Notes:
- The catalog is read-only for the booking core; in production it is owned elsewhere
- Run migrations (`alembic upgrade head`) first when targeting PostgreSQL
"""

import asyncio
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

from sqlalchemy import select
from uuid_utils.compat import uuid7

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.database.orm_db_setting import (
    create_db_and_tables,
    dispose_engine,
    get_session_maker,
)
from cinema_booking.service.booking.domain.entity.caller_entity import Caller, CallerRole
from cinema_booking.service.booking.domain.entity.showing_entity import SeatCategory
from cinema_booking.service.booking.driven_adapter.model import (
    ProfileModel,
    ScreenModel,
    SeatModel,
    ShowingModel,
)
from cinema_booking.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


ROWS = 'ABCDEFGHIJ'
SEATS_PER_ROW = 12
BASE_PRICE = Decimal('800.00')

# row -> (category, price multiplier)
ROW_CATEGORIES = {
    **{row: (SeatCategory.REGULAR, Decimal('1.00')) for row in 'ABCDE'},
    **{row: (SeatCategory.PREMIUM, Decimal('1.25')) for row in 'FGH'},
    **{row: (SeatCategory.VIP, Decimal('1.50')) for row in 'IJ'},
}

SHOWINGS = [
    ('tt1375666', 1, time(19, 30)),
    ('tt0816692', 1, time(22, 15)),
    ('tt15398776', 2, time(18, 0)),
]

DEMO_USERS = [
    Caller(user_id=uuid7(), name='Demo Customer', role=CallerRole.CUSTOMER),
    Caller(user_id=uuid7(), name='Demo Admin', role=CallerRole.ADMIN),
]


def _venue_today() -> date:
    return datetime.now(timezone.utc).astimezone(ZoneInfo(settings.VENUE_TIMEZONE)).date()


async def seed() -> None:
    if not settings.is_postgres:
        await create_db_and_tables()

    async with get_session_maker()() as session:
        existing = await session.execute(select(ScreenModel.id).limit(1))
        if existing.scalar_one_or_none() is not None:
            print('⚠️  Catalog already seeded, skipping')
            return

        print('🎬 Creating screen and seats...')
        screen = ScreenModel(id=uuid7(), name='Screen 1', theater_name='Downtown Cinema')
        session.add(screen)
        for row in ROWS:
            category, multiplier = ROW_CATEGORIES[row]
            for number in range(1, SEATS_PER_ROW + 1):
                session.add(
                    SeatModel(
                        id=uuid7(),
                        screen_id=screen.id,
                        row_label=row,
                        seat_number=number,
                        category=category.value,
                        price_multiplier=multiplier,
                    )
                )
        print(f'   ✅ {len(ROWS) * SEATS_PER_ROW} seats on {screen.name}')

        print('🎞️ Creating showings...')
        today = _venue_today()
        for movie_ref, days_ahead, show_time in SHOWINGS:
            showing = ShowingModel(
                id=uuid7(),
                movie_ref=movie_ref,
                screen_id=screen.id,
                show_date=today + timedelta(days=days_ahead),
                show_time=show_time,
                base_price=BASE_PRICE,
                is_active=True,
            )
            session.add(showing)
            print(f'   ✅ {movie_ref} on {showing.show_date} {show_time:%H:%M}: {showing.id}')

        print('👥 Creating demo profiles...')
        jwt_auth = JwtAuth()
        for caller in DEMO_USERS:
            session.add(ProfileModel(user_id=caller.user_id, full_name=caller.name))
            print(f'   ✅ {caller.role.value}: {caller.user_id}')
            print(f'      Bearer {jwt_auth.create_jwt_token(caller)}')

        await session.commit()

    print('🎉 Seed complete')


async def main() -> None:
    try:
        await seed()
    finally:
        await dispose_engine()


if __name__ == '__main__':
    asyncio.run(main())
