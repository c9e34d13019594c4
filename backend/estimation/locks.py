"""
Concurrency helpers for the in-memory room registry.

asyncio ships a plain mutex only; the registry needs read-many/write-one
access, so RWLock builds that on top of asyncio.Condition.

Usage:
    lock = RWLock()
    async with lock.read():
        ...  # any number of readers at once
    async with lock.write():
        ...  # exclusive
"""
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator


class RWLock:
    """Reader/writer lock for coroutines on a single event loop.

    Writers take priority: once a writer is waiting, new readers queue behind
    it so a steady stream of lookups cannot starve mutations.
    """

    def __init__(self) -> None:
        self._cond = asyncio.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @property
    def readers(self) -> int:
        return self._readers

    @property
    def writing(self) -> bool:
        return self._writer

    @asynccontextmanager
    async def read(self) -> AsyncIterator[None]:
        async with self._cond:
            await self._cond.wait_for(
                lambda: not self._writer and self._writers_waiting == 0
            )
            self._readers += 1
        try:
            yield
        finally:
            self._readers -= 1
            if self._readers == 0:
                await asyncio.shield(self._notify_all())

    @asynccontextmanager
    async def write(self) -> AsyncIterator[None]:
        async with self._cond:
            self._writers_waiting += 1
            try:
                await self._cond.wait_for(
                    lambda: not self._writer and self._readers == 0
                )
            except BaseException:
                # readers parked behind this writer must re-check
                self._writers_waiting -= 1
                self._cond.notify_all()
                raise
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            self._writer = False
            await asyncio.shield(self._notify_all())

    async def _notify_all(self) -> None:
        # State is updated before this runs, so a cancelled release still frees the lock.
        async with self._cond:
            self._cond.notify_all()
