"""
Ledger clocks.

Contracts compare activation times and sale windows against whole-second
timestamps. Scenarios and the ledger must read the same clock.
"""

import asyncio
import time
from abc import ABC, abstractmethod
from typing import Optional


class Clock(ABC):
    """Time source shared by a ledger and the pipelines driving it."""

    @abstractmethod
    def now(self) -> int:
        """Current unix time in whole seconds."""

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for ``seconds``."""


class SystemClock(Clock):
    """Wall clock. Suspensions take real time."""

    def now(self) -> int:
        return int(time.time())

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock(Clock):
    """
    Deterministic clock for tests.

    ``sleep`` advances time instead of waiting, then yields to the event loop
    once so other tasks still interleave.
    """

    def __init__(self, start: Optional[float] = None):
        self._time = float(start if start is not None else time.time())

    def now(self) -> int:
        return int(self._time)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("Cannot move a clock backwards")
        self._time += seconds

    async def sleep(self, seconds: float) -> None:
        self.advance(seconds)
        await asyncio.sleep(0)

    def __repr__(self) -> str:
        return f"<ManualClock t={self._time}>"
