"""
Bearer token verification.

Identity is issued by an external service; this side only verifies the HS256 signature
and rebuilds the caller from the claims (no database lookup).
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict
from uuid import UUID

import jwt

from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.exception.exceptions import AuthenticationError
from cinema_booking.service.booking.domain.entity.caller_entity import Caller, CallerRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire_days = 7

    def create_jwt_token(self, caller: Caller) -> str:
        """Development and test helper; production tokens come from the identity service."""
        now = datetime.now(timezone.utc)
        payload = {
            'sub': str(caller.user_id),
            'exp': now + timedelta(days=self.token_expire_days),
            'iat': now,
            'user_id': str(caller.user_id),
            'name': caller.name,
            'role': caller.role.value,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def get_caller_from_jwt(self, token: str | None) -> Caller:
        if not token:
            raise AuthenticationError()

        payload = self.decode_jwt_token(token)
        user_id = payload.get('user_id')
        role = payload.get('role', CallerRole.CUSTOMER.value)
        if not user_id:
            raise AuthenticationError('Invalid token')

        try:
            return Caller(user_id=UUID(str(user_id)), name=payload.get('name'), role=CallerRole(role))
        except ValueError:
            raise AuthenticationError('Invalid token')
