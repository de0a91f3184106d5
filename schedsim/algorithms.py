from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Deque, Dict, Iterable, List, Optional, Sequence

from .metrics import derive_result, empty_result
from .models import IDLE, AlgorithmResult, Policy, Process
from .registry import prepare_processes, validate_quantum, validate_switch_cost
from .timeline import ContextSwitchAccountant, Timeline, from_ticks, to_ticks

logger = logging.getLogger(__name__)

DEFAULT_QUANTUM = 2
CONTEXT_SWITCH_TIME = 0.1


class SimulationState:
    """
    Bookkeeping for a single simulation run. All times are in ticks.

    Built fresh for every call to :func:`simulate`; nothing is shared between
    runs, so several policies can be simulated concurrently.
    """

    def __init__(self, processes: List[Process], switch_cost: int) -> None:
        # Arrival-ordered, validated input.
        self.processes = processes
        self.arrival = {p.pid: to_ticks(p.arrival_time) for p in processes}
        self.remaining = {p.pid: to_ticks(p.burst_time) for p in processes}
        self.first_start: Dict[str, int] = {}
        self.completion: Dict[str, int] = {}
        self.timeline = Timeline()
        self.switches = ContextSwitchAccountant(switch_cost)
        self.now = 0

    def incomplete(self) -> bool:
        return len(self.completion) < len(self.processes)

    def eligible(self) -> List[Process]:
        return [
            p
            for p in self.processes
            if self.arrival[p.pid] <= self.now and self.remaining[p.pid] > 0
        ]

    def next_arrival(self) -> int:
        return min(self.arrival[p.pid] for p in self.processes if self.remaining[p.pid] > 0)

    def idle_until(self, target: int) -> None:
        if self.now < target:
            logger.debug("CPU idle %.1f-%.1f", from_ticks(self.now), from_ticks(target))
            self.timeline.record(IDLE, self.now, target)
            self.now = target
            self.switches.reset()

    def dispatch(self, pid: str) -> None:
        overhead = self.switches.dispatch(pid)
        if overhead:
            logger.debug("context switch to %s at %.1f", pid, from_ticks(self.now))
            self.now += overhead
        if pid not in self.first_start:
            self.first_start[pid] = self.now

    def run(self, pid: str, ticks: int) -> None:
        start = self.now
        self.now += ticks
        self.remaining[pid] -= ticks
        self.timeline.record(pid, start, self.now)
        if self.remaining[pid] == 0:
            self.completion[pid] = self.now
            logger.debug("%s completed at %.1f", pid, from_ticks(self.now))


SelectionKey = Callable[[SimulationState, Process], tuple]


def _by_arrival(state: SimulationState, p: Process) -> tuple:
    return (state.arrival[p.pid],)


def _by_burst(state: SimulationState, p: Process) -> tuple:
    return (p.burst_time, state.arrival[p.pid])


def _by_priority(state: SimulationState, p: Process) -> tuple:
    return (p.priority, state.arrival[p.pid])


def _by_remaining(state: SimulationState, p: Process) -> tuple:
    return (state.remaining[p.pid], state.arrival[p.pid])


def _select(state: SimulationState, key: SelectionKey) -> Optional[Process]:
    ready = state.eligible()
    if not ready:
        return None
    # min() keeps the first of equal keys, i.e. input order among equal arrivals.
    return min(ready, key=lambda p: key(state, p))


def _run_to_completion(state: SimulationState, key: SelectionKey) -> None:
    """
    Non-preemptive loop: the selected process keeps the CPU until it finishes.
    """
    while state.incomplete():
        p = _select(state, key)
        if p is None:
            state.idle_until(state.next_arrival())
            continue

        state.dispatch(p.pid)
        state.run(p.pid, state.remaining[p.pid])


def _run_ticks(state: SimulationState, key: SelectionKey) -> None:
    """
    Preemptive loop: the selection rule is re-evaluated every tick, so a
    better candidate takes over as soon as it becomes eligible.
    """
    while state.incomplete():
        p = _select(state, key)
        if p is None:
            state.idle_until(state.next_arrival())
            continue

        state.dispatch(p.pid)
        state.run(p.pid, 1)


def _run_round_robin(state: SimulationState, quantum: int) -> None:
    processes = state.processes
    ready: Deque[str] = deque()
    queued: set[str] = set()
    cursor = 0

    def admit_arrivals() -> None:
        nonlocal cursor
        while cursor < len(processes) and state.arrival[processes[cursor].pid] <= state.now:
            pid = processes[cursor].pid
            if pid not in queued and state.remaining[pid] > 0:
                ready.append(pid)
                queued.add(pid)
            cursor += 1

    admit_arrivals()

    while state.incomplete():
        if not ready:
            state.idle_until(state.arrival[processes[cursor].pid])
            admit_arrivals()
            continue

        pid = ready.popleft()
        queued.discard(pid)

        state.dispatch(pid)
        state.run(pid, min(state.remaining[pid], quantum))

        # Arrivals during the slice queue up ahead of the preempted process.
        admit_arrivals()
        if state.remaining[pid] > 0:
            ready.append(pid)
            queued.add(pid)


RUNNERS: Dict[Policy, Callable[[SimulationState, int], None]] = {
    Policy.FCFS: lambda state, quantum: _run_to_completion(state, _by_arrival),
    Policy.SJF: lambda state, quantum: _run_to_completion(state, _by_burst),
    Policy.PRIORITY: lambda state, quantum: _run_to_completion(state, _by_priority),
    Policy.SRTF: lambda state, quantum: _run_ticks(state, _by_remaining),
    Policy.PRIORITY_PREEMPTIVE: lambda state, quantum: _run_ticks(state, _by_priority),
    Policy.RR: _run_round_robin,
}


def simulate(
    policy: Policy | str,
    processes: Iterable[Process],
    quantum: float = DEFAULT_QUANTUM,
    context_switch_cost: float = CONTEXT_SWITCH_TIME,
) -> AlgorithmResult:
    """
    Simulate ``policy`` over ``processes`` and return the timeline and metrics.

    ``quantum`` is only consulted for Round Robin. Every dispatch that moves
    the CPU from one process to another costs ``context_switch_cost`` time
    units; the overhead advances the clock but is not part of the timeline.

    Raises ``InvalidWorkloadError`` for duplicate ids, non-positive bursts,
    negative arrivals, a non-positive RR quantum, or time values finer than
    the 0.1 tick.
    """
    policy = Policy.parse(policy)
    processes = list(processes)
    ordered = prepare_processes(processes)
    quantum_ticks = validate_quantum(quantum) if policy.uses_quantum else 0
    switch_cost = validate_switch_cost(context_switch_cost)
    result_quantum = quantum if policy.uses_quantum else None

    if not ordered:
        return empty_result(policy, result_quantum)

    logger.info("Simulating %s over %d processes", policy.label, len(ordered))
    state = SimulationState(ordered, switch_cost)
    RUNNERS[policy](state, quantum_ticks)

    result = derive_result(policy, result_quantum, processes, state)
    logger.info(
        "%s finished at t=%.1f with %d context switches",
        policy.label,
        result.total_time,
        result.context_switches,
    )
    return result


def compare(
    policies: Sequence[Policy | str],
    processes: Iterable[Process],
    quantum: float = DEFAULT_QUANTUM,
    context_switch_cost: float = CONTEXT_SWITCH_TIME,
    max_workers: Optional[int] = None,
) -> List[AlgorithmResult]:
    """
    Run several policies over the same workload, in parallel, and return the
    results in the order the policies were given.
    """
    resolved = [Policy.parse(p) for p in policies]
    snapshot = list(processes)

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [
            pool.submit(simulate, policy, snapshot, quantum, context_switch_cost)
            for policy in resolved
        ]
        return [f.result() for f in futures]
