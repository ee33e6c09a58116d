"""
Cinema Booking Core - Main Application
Serves seat availability, seat holds, booking finalization and cancellation.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from cinema_booking.platform.app_factory import create_app
from cinema_booking.platform.config.core_setting import settings
from cinema_booking.platform.config.di import cleanup, container, setup
from cinema_booking.platform.config.wire_modules import WIRE_MODULES
from cinema_booking.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.platform.observability.tracing import TracingConfig


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [Cinema Booking] Starting up...')

    tracing = TracingConfig(service_name='cinema-booking')
    if settings.OTEL_ENABLED:
        tracing.setup()
        Logger.base.info('📊 [Cinema Booking] Tracing configured')

    setup()
    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Cinema Booking] Dependency injection wired')

    # Postgres schemas are owned by Alembic; local SQLite files are created on the fly
    if not settings.is_postgres:
        await create_db_and_tables()
        Logger.base.info('🗄️ [Cinema Booking] SQLite tables ensured')

    Logger.base.info('✅ [Cinema Booking] Startup complete')

    yield

    Logger.base.info('🛑 [Cinema Booking] Shutting down...')

    await dispose_engine()
    Logger.base.info('🗄️ [Cinema Booking] Database engine disposed')

    tracing.shutdown()
    container.unwire()
    cleanup()

    Logger.base.info('👋 [Cinema Booking] Shutdown complete')


app = create_app(lifespan=lifespan)
