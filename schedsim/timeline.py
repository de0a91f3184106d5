from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from .models import IDLE, TimelineSlice

# The engine keeps time in integer ticks of 0.1 time units so that
# tick-by-tick preemptive runs never accumulate floating-point drift.
TICKS_PER_UNIT = 10
TICK = 1 / TICKS_PER_UNIT


def to_ticks(value: float) -> int:
    """
    Convert a time value to whole ticks, or raise ``ValueError`` if it is not
    a multiple of the tick size.
    """
    scaled = float(value) * TICKS_PER_UNIT
    if math.isnan(scaled) or math.isinf(scaled):
        raise ValueError(f"time value must be finite, got {value!r}")
    ticks = round(scaled)
    if abs(scaled - ticks) > 1e-6:
        raise ValueError(f"time value {value!r} is not a multiple of {TICK}")
    return int(ticks)


def from_ticks(ticks: int) -> float:
    return round(ticks / TICKS_PER_UNIT, 1)


@dataclass
class _Span:
    pid: str
    start: int
    end: int


class Timeline:
    """
    Ordered CPU-occupancy intervals, in ticks.

    Adjacent intervals of the same pid are merged, so a process that runs for
    many consecutive ticks shows up as a single slice.
    """

    def __init__(self) -> None:
        self._spans: List[_Span] = []

    def __len__(self) -> int:
        return len(self._spans)

    def record(self, pid: str, start: int, end: int) -> None:
        if start >= end:
            return
        if self._spans and self._spans[-1].pid == pid:
            self._spans[-1].end = end
        else:
            self._spans.append(_Span(pid=pid, start=start, end=end))

    def busy_ticks(self) -> int:
        return sum(s.end - s.start for s in self._spans if s.pid != IDLE)

    def slices(self) -> List[TimelineSlice]:
        return [
            TimelineSlice(pid=s.pid, start_time=from_ticks(s.start), end_time=from_ticks(s.end))
            for s in self._spans
        ]


class ContextSwitchAccountant:
    """
    Tracks the last dispatched pid and charges a fixed overhead whenever the
    CPU moves from one process to a different one.
    """

    def __init__(self, cost: int) -> None:
        self.cost = cost
        self.count = 0
        self.last_pid = ""

    def dispatch(self, pid: str) -> int:
        """
        Register a dispatch of ``pid``; return the overhead in ticks to charge
        before it starts.
        """
        charged = 0
        if self.last_pid and self.last_pid != pid and pid != IDLE:
            self.count += 1
            charged = self.cost
        self.last_pid = pid
        return charged

    def reset(self) -> None:
        # Idle periods clear the baseline: resuming after idle never counts.
        self.last_pid = ""
