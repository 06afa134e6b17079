"""Deferred one-shot callbacks for the single control thread."""

from __future__ import annotations

import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Host timer seam: a clock plus cancelable one-shot callbacks."""

    def now(self) -> float: ...

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass(order=True, slots=True)
class _TickEntry:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class TickScheduler:
    """Scheduler advanced explicitly by the per-tick update.

    Callbacks fire at most once, in due-time order, from inside `advance`.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._clock = start
        self._queue: list[_TickEntry] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._clock

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry.cancelled)

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _TickEntry:
        entry = _TickEntry(due=self._clock + max(delay_s, 0.0), seq=next(self._seq), callback=callback)
        heapq.heappush(self._queue, entry)
        return entry

    def advance(self, dt: float) -> int:
        """Move the clock forward by `dt` seconds and run due callbacks."""
        self._clock += max(dt, 0.0)
        fired = 0
        while self._queue and self._queue[0].due <= self._clock:
            entry = heapq.heappop(self._queue)
            if entry.cancelled:
                continue
            entry.cancelled = True
            entry.callback()
            fired += 1
        return fired
