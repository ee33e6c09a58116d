#!/usr/bin/env python3
"""
Expired Hold Sweep
Delete seat holds whose lease has run out

Expired holds are already ignored when availability is computed, so this is
storage hygiene only. Schedule it from cron or a k8s CronJob, e.g. every 5 minutes.
"""

import asyncio

from cinema_booking.platform.config.di import container
from cinema_booking.platform.database.orm_db_setting import dispose_engine
from cinema_booking.platform.logging.loguru_io import Logger
from cinema_booking.service.booking.app.command.sweep_expired_holds_use_case import (
    SweepExpiredHoldsUseCase,
)


async def main() -> None:
    use_case = SweepExpiredHoldsUseCase(
        uow_factory=container.unit_of_work, clock=container.clock()
    )
    try:
        removed = await use_case.sweep()
    finally:
        await dispose_engine()
    Logger.base.info(f'✅ Sweep finished, {removed} hold(s) removed')


if __name__ == '__main__':
    asyncio.run(main())
