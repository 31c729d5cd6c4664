"""
Pacing policies applied between calls to rate-limited inference services.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class Pacer:
    """Awaited between units of work. The base policy does not wait."""

    async def wait(self) -> None:
        return None


class NoDelayPacer(Pacer):
    """Explicit no-op pacer, used by tests and one-off runs."""


class FixedDelayPacer(Pacer):
    """Sleeps a fixed number of seconds on every wait."""

    def __init__(self, delay_seconds: float = 1.0):
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds

    async def wait(self) -> None:
        if self.delay_seconds:
            logger.debug(f"Pacing for {self.delay_seconds:.2f}s")
            await asyncio.sleep(self.delay_seconds)
