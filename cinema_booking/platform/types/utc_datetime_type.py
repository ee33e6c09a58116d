from datetime import datetime, timezone
from typing import Any

from sqlalchemy import DateTime
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator


class UtcDateTime(TypeDecorator[datetime]):
    """
    Timezone-aware UTC datetime column.

    PostgreSQL stores TIMESTAMPTZ natively. SQLite has no timezone support, so values are
    written as naive UTC and re-tagged with UTC when read back.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if not isinstance(value, datetime):
            raise TypeError(f'UtcDateTime expects datetime, got {type(value).__name__}')
        if value.tzinfo is None:
            raise ValueError('naive datetime is not allowed, attach a timezone first')
        value = value.astimezone(timezone.utc)
        if dialect.name != 'postgresql':
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: Any, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
