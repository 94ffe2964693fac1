"""Timing helpers shared by tool execution and the orchestrator."""

from __future__ import annotations

import time
from collections.abc import Callable


class Timer:
    """Context manager measuring a block in milliseconds.

    `elapsed_ms` is also set when the block raises, so failed tool
    invocations still report how long they ran.
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._started = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "Timer":
        self._started = self._clock()
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.elapsed_ms = (self._clock() - self._started) * 1000.0
