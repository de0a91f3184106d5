from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from .models import AlgorithmResult, Policy, Process, ProcessMetrics
from .timeline import from_ticks, to_ticks

if TYPE_CHECKING:
    from .algorithms import SimulationState


def empty_result(policy: Policy, quantum: Optional[float] = None) -> AlgorithmResult:
    return AlgorithmResult(policy=policy, quantum=quantum)


def derive_result(
    policy: Policy,
    quantum: Optional[float],
    processes: List[Process],
    state: SimulationState,
) -> AlgorithmResult:
    """
    Turn the completion and first-dispatch bookkeeping of a finished run into
    per-process metrics (in caller order) and aggregate statistics.
    """
    metrics: List[ProcessMetrics] = []

    for p in processes:
        arrival = to_ticks(p.arrival_time)
        burst = to_ticks(p.burst_time)
        completion = state.completion.get(p.pid, 0)
        first_start = state.first_start.get(p.pid, arrival)

        turnaround = max(0, completion - arrival)
        waiting = max(0, turnaround - burst)
        response = max(0, first_start - arrival)

        metrics.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                burst_time=p.burst_time,
                priority=p.priority,
                start_time=from_ticks(first_start),
                completion_time=from_ticks(completion),
                turnaround_time=from_ticks(turnaround),
                waiting_time=from_ticks(waiting),
                response_time=from_ticks(response),
                color=p.color,
            )
        )

    n = len(metrics)
    total_ticks = state.now
    total_time = from_ticks(total_ticks)
    summary = summarize_process_metrics(metrics)

    cpu_utilization = 100 * state.timeline.busy_ticks() / total_ticks if total_ticks > 0 else 0.0
    throughput = n / total_time if total_time > 0 else 0.0

    return AlgorithmResult(
        policy=policy,
        quantum=quantum,
        timeline=state.timeline.slices(),
        processes=metrics,
        avg_waiting_time=round(summary["avg_waiting"], 2),
        avg_turnaround_time=round(summary["avg_turnaround"], 2),
        avg_response_time=round(summary["avg_response"], 2),
        cpu_utilization=round(cpu_utilization, 2),
        # Throughput keeps three decimals, the other aggregates two.
        throughput=round(throughput, 3),
        context_switches=state.switches.count,
        total_time=total_time,
    )


def summarize_process_metrics(processes: List[ProcessMetrics]) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(p.response_time for p in processes) / n,
    }
