"""
Time providers.

The stream engine never calls ``time`` or ``asyncio.sleep`` directly; it goes
through a TimeProvider so that backoff schedules can be asserted in tests
without waiting on the wall clock.
"""

import asyncio
import time
from abc import ABC, abstractmethod


class TimeProvider(ABC):
    """Protocol for providing time values, allows injection of fake time in tests."""

    @abstractmethod
    def now(self) -> float:
        """Return current time in seconds since epoch."""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the calling task for ``seconds``."""
        pass


class SystemTimeProvider(TimeProvider):
    """Real time provider using system clock."""

    def now(self) -> float:
        return time.time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class FakeTimeProvider(TimeProvider):
    """
    Fake time provider for deterministic tests.

    ``sleep`` advances the fake clock instantly and records the requested
    duration in ``sleep_history``.
    """

    def __init__(self, initial_time: float = 1000.0):
        self.current_time = initial_time
        self.sleep_history: list[float] = []

    def now(self) -> float:
        return self.current_time

    async def sleep(self, seconds: float) -> None:
        self.sleep_history.append(seconds)
        self.current_time += seconds
        # Still yield to the loop so cancellation can land here
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        """Advance time by given seconds."""
        self.current_time += seconds
