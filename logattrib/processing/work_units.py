"""
Cooperative work units for long single-threaded scans.

Long scans are written as generators that yield after every ``batch_size``
items. A driver decides what yielding means: nothing for synchronous callers,
a pass through the event loop for asyncio callers. Resumption always
continues exactly where the scan stopped.
"""

import asyncio
import logging
from typing import Generator, TypeVar

from logattrib.config.settings import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Generators yield None at batch boundaries and return their result
Work = Generator[None, None, T]


class WorkBudget:
    """
    Counts processed items and signals batch boundaries.

    Usage inside a generator::

        for event in events:
            if budget.tick():
                yield
            ...
    """

    def __init__(self, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive: {batch_size}")
        self.batch_size = batch_size
        self.processed = 0
        self.yields = 0
        self._pending = 0

    def tick(self) -> bool:
        """Account for one item. Returns True when the caller should yield."""
        self.processed += 1
        self._pending += 1
        if self._pending >= self.batch_size:
            self._pending = 0
            self.yields += 1
            return True
        return False


def run_to_completion(work: Work[T]) -> T:
    """Drive a work generator synchronously and return its result."""
    while True:
        try:
            next(work)
        except StopIteration as stop:
            return stop.value


async def run_cooperatively(work: Work[T]) -> T:
    """Drive a work generator, handing control to the event loop at each yield."""
    steps = 0
    while True:
        try:
            next(work)
        except StopIteration as stop:
            logger.debug(f"Cooperative work finished after {steps} yields")
            return stop.value
        steps += 1
        await asyncio.sleep(0)
