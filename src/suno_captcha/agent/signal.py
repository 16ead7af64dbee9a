from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from suno_captcha.exceptions import ChallengeCancelled

T = TypeVar("T")


class CancellationSignal:
    """Set-once cancellation token shared by the challenge loop and the interceptor."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: str | None = None

    def set(self, reason: str = "cancelled") -> bool:
        # Only the first caller wins, later calls keep the original reason
        if self._event.is_set():
            return False
        self.reason = reason
        self._event.set()
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()

    def raise_if_set(self):
        if self._event.is_set():
            raise ChallengeCancelled(f"Challenge loop cancelled: {self.reason}")

    async def race(self, aw: Awaitable[T]) -> T:
        """
        Await `aw` unless the signal fires first, in which case `aw` is cancelled
        and ChallengeCancelled is raised.
        """
        if self._event.is_set():
            if asyncio.iscoroutine(aw):
                aw.close()
            self.raise_if_set()

        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        # A finished operation keeps its result, the next suspension point sees the signal
        if task.done():
            return task.result()

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.raise_if_set()
        raise ChallengeCancelled("Challenge loop cancelled")
