from datetime import datetime, timedelta, timezone

from cinema_booking.service.booking.app.interface.i_clock import IClock


DEFAULT_NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


class FrozenClock(IClock):
    """Time only moves when a test calls advance()."""

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        self._now += timedelta(**kwargs)
        return self._now

    def set(self, now: datetime) -> None:
        self._now = now
