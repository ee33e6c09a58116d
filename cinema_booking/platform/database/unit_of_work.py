"""
Unit of Work Pattern - one transaction, one session, shared by every repository

Architecture:
- UoW owns the session lifecycle and commit/rollback
- Repositories receive the shared session from the UoW
- Use cases coordinate repositories through the UoW
- `lock_showing` serializes read-check-write sequences for one showing
"""

from __future__ import annotations

import abc
import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
import hashlib
from typing import TYPE_CHECKING, AsyncIterator, Callable
from uuid import UUID
import weakref

import anyio
import attrs
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from cinema_booking.service.booking.app.interface.i_booking_command_repo import (
        IBookingCommandRepo,
    )
    from cinema_booking.service.booking.app.interface.i_booking_query_repo import (
        IBookingQueryRepo,
    )
    from cinema_booking.service.booking.app.interface.i_seat_hold_command_repo import (
        ISeatHoldCommandRepo,
    )
    from cinema_booking.service.booking.app.interface.i_showing_query_repo import (
        IShowingQueryRepo,
    )


def showing_lock_key(showing_id: UUID) -> int:
    """Stable signed 64-bit key for pg_advisory_xact_lock (identical across workers)."""
    digest = hashlib.blake2b(f'showing:{showing_id}'.encode(), digest_size=8).digest()
    return int.from_bytes(digest, 'big', signed=True)


@attrs.define
class _LocalShowingLock:
    lock: asyncio.Lock = attrs.field(factory=asyncio.Lock)
    users: int = 0  # holder plus waiters


# Per event loop, per showing. asyncio.Lock must not be shared across loops.
_local_showing_locks: weakref.WeakKeyDictionary[
    asyncio.AbstractEventLoop, dict[UUID, _LocalShowingLock]
] = weakref.WeakKeyDictionary()


@asynccontextmanager
async def _local_showing_lock(showing_id: UUID) -> AsyncIterator[None]:
    """Hold the in-process lock for a showing; drop its entry once nobody holds or awaits it."""
    locks = _local_showing_locks.setdefault(asyncio.get_running_loop(), {})
    entry = locks.setdefault(showing_id, _LocalShowingLock())
    entry.users += 1
    try:
        async with entry.lock:
            yield
    finally:
        entry.users -= 1
        if entry.users == 0:
            del locks[showing_id]


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the booking service

    Usage:
        async with uow:
            await uow.lock_showing(showing_id=showing_id)
            booking = await uow.booking_command_repo.create(booking=...)
            await uow.commit()

    Leaving the block without commit rolls back.
    """

    showing_query_repo: IShowingQueryRepo
    seat_hold_command_repo: ISeatHoldCommandRepo
    booking_command_repo: IBookingCommandRepo
    booking_query_repo: IBookingQueryRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def lock_showing(self, *, showing_id: UUID) -> None:
        """Block until this unit of work owns the showing alone; held until commit/rollback."""
        raise NotImplementedError

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    A fresh session is opened on every `async with`, so one instance serves one transaction.
    On PostgreSQL the showing lock is a transaction-scoped advisory lock; other dialects
    (SQLite in local runs and tests) fall back to an in-process asyncio.Lock that is
    released after the transaction ends.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory
        self._exit_stack: AsyncExitStack | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from cinema_booking.service.booking.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from cinema_booking.service.booking.driven_adapter.repo.booking_query_repo_impl import (
            BookingQueryRepoImpl,
        )
        from cinema_booking.service.booking.driven_adapter.repo.seat_hold_command_repo_impl import (
            SeatHoldCommandRepoImpl,
        )
        from cinema_booking.service.booking.driven_adapter.repo.showing_query_repo_impl import (
            ShowingQueryRepoImpl,
        )

        self._exit_stack = AsyncExitStack()
        self.session = self._session_factory()

        # Create repositories with shared session
        self.showing_query_repo = ShowingQueryRepoImpl()
        self.showing_query_repo.session = self.session
        self.seat_hold_command_repo = SeatHoldCommandRepoImpl(session=self.session)
        self.booking_command_repo = BookingCommandRepoImpl(session=self.session)
        self.booking_query_repo = BookingQueryRepoImpl()
        self.booking_query_repo.session = self.session

        await super().__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        # Cleanup must finish even when the caller was cancelled (finalize timeout)
        with anyio.CancelScope(shield=True):
            try:
                await super().__aexit__(*args)
            finally:
                if self.session is not None:
                    await self.session.close()
                    self.session = None
                # In-process showing locks are released only after the transaction is gone
                if self._exit_stack is not None:
                    await self._exit_stack.aclose()
                    self._exit_stack = None

    async def lock_showing(self, *, showing_id: UUID) -> None:
        assert self.session is not None and self._exit_stack is not None
        if self.session.bind.dialect.name == 'postgresql':
            await self.session.execute(
                text('SELECT pg_advisory_xact_lock(:key)'), {'key': showing_lock_key(showing_id)}
            )
        else:
            await self._exit_stack.enter_async_context(_local_showing_lock(showing_id))

    async def _commit(self) -> None:
        assert self.session is not None
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
