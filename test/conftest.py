"""
Test Configuration and Fixtures

This module provides:
- Test environment (temporary SQLite database, UTC venue clock) set before any app import
- A frozen clock injected through the DI container
- Per-test schema creation and teardown for integration tests
- HTTP client against the test app

Architecture:
- Unit tests (marked `unit`): mocked dependencies, no database
- Integration tests: real SQLAlchemy stack on SQLite, frozen clock, real DI wiring
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are read at import time
# =============================================================================
import os
from pathlib import Path
import tempfile


def _early_setup_test_environment() -> None:
    worker_id = os.environ.get('PYTEST_XDIST_WORKER', 'master')
    db_dir = Path(tempfile.mkdtemp(prefix=f'cinema_booking_{worker_id}_'))
    os.environ['DATABASE_URL_ASYNC'] = f'sqlite+aiosqlite:///{db_dir / "test.db"}'

    os.environ['DEBUG'] = 'false'
    os.environ['OTEL_ENABLED'] = 'false'
    os.environ['VENUE_TIMEZONE'] = 'UTC'
    os.environ['CURRENCY'] = 'PKR'
    os.environ['HOLD_TTL_MINUTES'] = '10'
    os.environ['MAX_SEATS_PER_BOOKING'] = '10'
    os.environ['MEMBER_REFUND_POLICY'] = 'time_window'
    os.environ['GUEST_REFUND_POLICY'] = 'time_window'
    os.environ['REFUND_WINDOW_HOURS'] = '24'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import AsyncGenerator, Generator  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402

from cinema_booking.platform.config.di import container  # noqa: E402
from cinema_booking.platform.config.wire_modules import WIRE_MODULES  # noqa: E402
from cinema_booking.platform.database.orm_db_setting import (  # noqa: E402
    create_db_and_tables,
    dispose_engine,
    drop_db_and_tables,
)
from test.shared.frozen_clock import FrozenClock  # noqa: E402
from test.shared.given import *  # noqa: E402, F403
from test.test_main import app  # noqa: E402


# =============================================================================
# Pytest Hooks
# =============================================================================
def pytest_configure(config: pytest.Config) -> None:
    container.wire(modules=WIRE_MODULES)


def pytest_unconfigure(config: pytest.Config) -> None:
    container.unwire()


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        markers = [m.name for m in item.iter_markers()]
        if 'unit' not in markers:
            item.fixturenames.extend(['clean_database'])


# =============================================================================
# Fixtures
# =============================================================================
@pytest.fixture
def frozen_clock() -> Generator[FrozenClock, None, None]:
    clock = FrozenClock()
    container.clock.override(clock)
    yield clock
    container.clock.reset_override()


@pytest.fixture(scope='function')
async def clean_database(frozen_clock: FrozenClock) -> AsyncGenerator[None, None]:
    await create_db_and_tables()
    yield
    await drop_db_and_tables()
    await dispose_engine()


@pytest.fixture
async def client(clean_database: None) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url='http://test') as client:
        yield client
