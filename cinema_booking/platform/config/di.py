"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from cinema_booking.platform.config.core_setting import Settings
from cinema_booking.platform.database.orm_db_setting import Database
from cinema_booking.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from cinema_booking.service.booking.domain.refund_policy import RefundPolicy
from cinema_booking.service.booking.driven_adapter.clock.system_clock import SystemClock
from cinema_booking.service.booking.driven_adapter.repo.booking_query_repo_impl import (
    BookingQueryRepoImpl,
)
from cinema_booking.service.booking.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (loop-aware engine manager behind it)
    database = providers.Singleton(Database)

    # Time source (overridden with a frozen clock in tests)
    clock = providers.Singleton(SystemClock)

    # One unit of work per transaction; use cases receive `unit_of_work.provider` as a factory
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session_factory
    )

    # Read-side repository (stateless - uses session_factory per call)
    booking_query_repo = providers.Singleton(
        BookingQueryRepoImpl, session_factory=database.provided.session
    )

    # Refund policy per booking type
    member_refund_policy = providers.Singleton(
        RefundPolicy.from_name,
        config_service.provided.MEMBER_REFUND_POLICY,
        window_hours=config_service.provided.REFUND_WINDOW_HOURS,
        flat_rate=config_service.provided.FLAT_REFUND_RATE,
    )
    guest_refund_policy = providers.Singleton(
        RefundPolicy.from_name,
        config_service.provided.GUEST_REFUND_POLICY,
        window_hours=config_service.provided.REFUND_WINDOW_HOURS,
        flat_rate=config_service.provided.FLAT_REFUND_RATE,
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
