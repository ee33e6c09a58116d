import asyncio

import pytest
from uuid_utils.compat import uuid7

from cinema_booking.platform.database.unit_of_work import (
    _local_showing_lock,
    _local_showing_locks,
    showing_lock_key,
)


pytestmark = pytest.mark.unit


def _held_showings() -> set:
    return set(_local_showing_locks.get(asyncio.get_running_loop(), {}))


class TestShowingLockKey:
    def test_key_is_stable_and_signed_64_bit(self):
        showing_id = uuid7()

        key = showing_lock_key(showing_id)

        assert key == showing_lock_key(showing_id)
        assert -(2**63) <= key < 2**63

    def test_different_showings_get_different_keys(self):
        assert showing_lock_key(uuid7()) != showing_lock_key(uuid7())


class TestLocalShowingLock:
    @pytest.mark.asyncio
    async def test_lock_serializes_critical_sections(self):
        showing_id = uuid7()
        order: list[str] = []

        async def critical(name: str) -> None:
            async with _local_showing_lock(showing_id):
                order.append(f'{name}:enter')
                await asyncio.sleep(0.01)
                order.append(f'{name}:exit')

        await asyncio.gather(critical('a'), critical('b'))

        assert order in (
            ['a:enter', 'a:exit', 'b:enter', 'b:exit'],
            ['b:enter', 'b:exit', 'a:enter', 'a:exit'],
        )

    @pytest.mark.asyncio
    async def test_other_showings_do_not_wait(self):
        first, second = uuid7(), uuid7()

        async with _local_showing_lock(first):
            async with asyncio.timeout(1):
                async with _local_showing_lock(second):
                    assert _held_showings() >= {first, second}

    @pytest.mark.asyncio
    async def test_entry_is_dropped_after_last_release(self):
        showing_id = uuid7()
        released = asyncio.Event()

        async def holder() -> None:
            async with _local_showing_lock(showing_id):
                await released.wait()

        async def waiter() -> None:
            async with _local_showing_lock(showing_id):
                pass

        tasks = [asyncio.create_task(holder()), asyncio.create_task(waiter())]
        await asyncio.sleep(0)
        assert showing_id in _held_showings()

        released.set()
        await asyncio.gather(*tasks)

        assert showing_id not in _held_showings()

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_leak_entry(self):
        showing_id = uuid7()

        async def waiter() -> None:
            async with _local_showing_lock(showing_id):
                pass

        async with _local_showing_lock(showing_id):
            task = asyncio.create_task(waiter())
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        assert showing_id not in _held_showings()
