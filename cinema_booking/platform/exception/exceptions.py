from typing import Any, Sequence


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    code: str = 'error'
    recoverable: bool = True

    def __init__(self, message: str, status_code: int, *, code: str | None = None) -> None:
        self.message = message
        self.status_code = status_code
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_content(self) -> dict[str, Any]:
        return {
            'detail': self.message,
            'code': self.code,
            'field': None,
            'recoverable': self.recoverable,
        }


class ValidationError(CustomBaseError):
    """Malformed or missing input; `field` names the offending input."""

    code = 'validation_error'

    def __init__(self, message: str, *, field: str) -> None:
        self.field = field
        super().__init__(message, 400)

    def to_content(self) -> dict[str, Any]:
        return super().to_content() | {'field': self.field}


class NoSeatsSelectedError(CustomBaseError):
    code = 'no_seats_selected'

    def __init__(self, message: str = 'At least one seat must be selected') -> None:
        super().__init__(message, 400)


class ForbiddenError(CustomBaseError):
    code = 'forbidden'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    code = 'not_found'

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message, 404, code=code)


class ConflictError(CustomBaseError):
    code = 'conflict'

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message, 409, code=code)


class SeatsUnavailableError(ConflictError):
    """Another party won the race for at least one seat."""

    def __init__(self, conflicting_seats: Sequence[Any]) -> None:
        self.conflicting_seats = [str(seat_id) for seat_id in conflicting_seats]
        super().__init__('Some seats are no longer available', code='seats_unavailable')

    def to_content(self) -> dict[str, Any]:
        return super().to_content() | {'conflicting_seats': self.conflicting_seats}


class AuthenticationError(CustomBaseError):
    code = 'not_authenticated'

    def __init__(self, message: str = 'Not authenticated') -> None:
        super().__init__(message, 401)


class BookingIntegrityError(CustomBaseError):
    """Storage failure or constraint violation not explained by a conflict."""

    code = 'booking_failed'
    recoverable = False

    def __init__(self, message: str = 'Booking could not be completed') -> None:
        super().__init__(message, 500)


class FinalizeTimeoutError(CustomBaseError):
    """Outcome unknown: resolve by idempotency key or reference before retrying."""

    code = 'finalize_timeout'
    recoverable = False

    def __init__(self, message: str = 'Booking request timed out, outcome unknown') -> None:
        super().__init__(message, 504)
