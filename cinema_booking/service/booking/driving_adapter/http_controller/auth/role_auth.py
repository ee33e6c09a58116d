from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from opentelemetry import trace

from cinema_booking.platform.config.di import Container
from cinema_booking.platform.constant.route_constant import GUEST_SESSION_HEADER
from cinema_booking.platform.exception.exceptions import AuthenticationError, ForbiddenError
from cinema_booking.service.booking.domain.entity.caller_entity import (
    MAX_GUEST_SESSION_LENGTH,
    Caller,
    guest_holder_key,
)
from cinema_booking.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


bearer_scheme = HTTPBearer(auto_error=False)


class RoleAuthStrategy:
    @staticmethod
    def is_admin(caller: Caller) -> bool:
        return caller.is_admin


@inject
async def get_optional_caller(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> Caller | None:
    """No Authorization header means a guest; a bad token is still rejected."""
    if credentials is None:
        return None
    return jwt_auth.get_caller_from_jwt(credentials.credentials)


async def get_current_caller(caller: Caller | None = Depends(get_optional_caller)) -> Caller:
    if caller is None:
        raise AuthenticationError()
    return caller


async def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={'user.id': str(caller.user_id), 'user.role': caller.role.value},
    ):
        if not RoleAuthStrategy.is_admin(caller):
            raise ForbiddenError('Only admins can perform this action')
        return caller


async def get_holder_key(
    caller: Caller | None = Depends(get_optional_caller),
    guest_session: str | None = Header(
        default=None, alias=GUEST_SESSION_HEADER, max_length=MAX_GUEST_SESSION_LENGTH
    ),
) -> str | None:
    """Members hold seats under their user id, guests under their session header."""
    if caller is not None:
        return caller.holder_key
    if guest_session and guest_session.strip():
        return guest_holder_key(guest_session)
    return None


async def require_holder_key(holder_key: str | None = Depends(get_holder_key)) -> str:
    if holder_key is None:
        raise AuthenticationError(f'Sign in or send the {GUEST_SESSION_HEADER} header')
    return holder_key
