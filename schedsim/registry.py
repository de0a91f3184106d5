from __future__ import annotations

from typing import Iterable, List

from .models import IDLE, Process
from .timeline import to_ticks


class InvalidWorkloadError(ValueError):
    """
    Raised when a workload or run parameter breaks the engine's input contract.
    """


def prepare_processes(processes: Iterable[Process]) -> List[Process]:
    """
    Validate a workload and return it as a new list ordered by arrival time.

    Ties keep their input order. The caller's records are never modified.
    """
    processes = list(processes)
    seen: set[str] = set()

    for p in processes:
        if not p.pid:
            raise InvalidWorkloadError(f"Process id must be non-empty: {p!r}")
        if p.pid == IDLE:
            raise InvalidWorkloadError(f"Process id '{IDLE}' is reserved for idle slices")
        if p.pid in seen:
            raise InvalidWorkloadError(f"Duplicate process id '{p.pid}'")
        seen.add(p.pid)

        if p.arrival_time < 0:
            raise InvalidWorkloadError(f"Process '{p.pid}' has negative arrival time {p.arrival_time}")
        if p.burst_time <= 0:
            raise InvalidWorkloadError(f"Process '{p.pid}' must have a positive burst time, got {p.burst_time}")
        if not isinstance(p.priority, int) or isinstance(p.priority, bool):
            raise InvalidWorkloadError(f"Process '{p.pid}' priority must be an integer, got {p.priority!r}")

        for name in ("arrival_time", "burst_time"):
            try:
                to_ticks(getattr(p, name))
            except ValueError as exc:
                raise InvalidWorkloadError(f"Process '{p.pid}' {name}: {exc}") from exc

    return sorted(processes, key=lambda p: p.arrival_time)


def validate_quantum(quantum: float) -> int:
    """
    Check a Round Robin quantum and return it in ticks.
    """
    if quantum is None or quantum <= 0:
        raise InvalidWorkloadError(f"Round Robin requires a positive quantum, got {quantum!r}")
    try:
        return to_ticks(quantum)
    except ValueError as exc:
        raise InvalidWorkloadError(f"Invalid quantum: {exc}") from exc


def validate_switch_cost(cost: float) -> int:
    if cost is None or cost < 0:
        raise InvalidWorkloadError(f"Context-switch cost must be non-negative, got {cost!r}")
    try:
        return to_ticks(cost)
    except ValueError as exc:
        raise InvalidWorkloadError(f"Invalid context-switch cost: {exc}") from exc
