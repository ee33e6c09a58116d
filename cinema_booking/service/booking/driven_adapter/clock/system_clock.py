from datetime import datetime, timezone

from cinema_booking.service.booking.app.interface.i_clock import IClock


class SystemClock(IClock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)
