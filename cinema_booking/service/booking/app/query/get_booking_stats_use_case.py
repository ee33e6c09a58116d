from datetime import datetime, time, timedelta, timezone
from typing import Self
from zoneinfo import ZoneInfo

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.config.di import Container
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.dto.booking_view import BookingStats
from cinema_booking.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from cinema_booking.service.booking.app.interface.i_clock import IClock


class GetBookingStatsUseCase:
    """Admin dashboard counters; "today" is the current calendar day at the venue."""

    def __init__(self, *, booking_query_repo: IBookingQueryRepo, clock: IClock) -> None:
        self.booking_query_repo = booking_query_repo
        self.clock = clock
        self.venue_tz = ZoneInfo(settings.VENUE_TIMEZONE)

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo, clock=clock)

    @Logger.io
    async def get_stats(self) -> BookingStats:
        local_today = self.clock.now().astimezone(self.venue_tz).date()
        day_start = datetime.combine(local_today, time.min, tzinfo=self.venue_tz)
        return await self.booking_query_repo.get_stats(
            day_start=day_start.astimezone(timezone.utc),
            day_end=(day_start + timedelta(days=1)).astimezone(timezone.utc),
        )
