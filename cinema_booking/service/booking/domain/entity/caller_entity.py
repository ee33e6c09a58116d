from enum import StrEnum
from uuid import UUID

import attrs

from cinema_booking.platform.exception.exceptions import ValidationError
from cinema_booking.platform.constant.route_constant import GUEST_SESSION_HEADER


# seat_hold.holder_key and booking.holder_key are String(100)
MAX_GUEST_SESSION_LENGTH = 64


class CallerRole(StrEnum):
    CUSTOMER = 'customer'
    ADMIN = 'admin'


@attrs.define(frozen=True)
class Caller:
    """Authenticated identity attached to a request. Guests have no Caller."""

    user_id: UUID
    name: str | None = None
    role: CallerRole = CallerRole.CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == CallerRole.ADMIN

    @property
    def holder_key(self) -> str:
        return member_holder_key(self.user_id)


def member_holder_key(user_id: UUID) -> str:
    return f'user:{user_id}'


def guest_holder_key(session_token: str) -> str:
    session_token = session_token.strip()
    if not session_token:
        raise ValidationError('Guest session is empty', field=GUEST_SESSION_HEADER)
    if len(session_token) > MAX_GUEST_SESSION_LENGTH:
        raise ValidationError(
            f'Guest session must be at most {MAX_GUEST_SESSION_LENGTH} characters',
            field=GUEST_SESSION_HEADER,
        )
    return f'guest:{session_token}'
