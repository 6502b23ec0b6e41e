from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass


logger = logging.getLogger(__name__)


@dataclass
class TriviaRotator:
    """Cycles through a fixed list of facts, one step per tick."""

    facts: tuple[str, ...]
    index: int = 0

    def __post_init__(self) -> None:
        if not self.facts:
            raise ValueError("TriviaRotator needs at least one fact.")

    @property
    def current(self) -> str:
        return self.facts[self.index]

    def tick(self) -> str:
        self.index = (self.index + 1) % len(self.facts)
        return self.current

    async def run(self, interval_seconds: float, on_tick: Callable[[int], None] | None = None) -> None:
        """Tick every ``interval_seconds`` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.tick()
            if on_tick is not None:
                on_tick(self.index)

    async def stream(self, interval_seconds: float, max_ticks: int | None = None) -> AsyncIterator[str]:
        """Yield the current fact, then the next one after every interval."""
        yield self.current
        ticks = 0
        try:
            while max_ticks is None or ticks < max_ticks:
                await asyncio.sleep(interval_seconds)
                ticks += 1
                yield self.tick()
        finally:
            logger.debug("Trivia stream stopped after %s ticks", ticks)
