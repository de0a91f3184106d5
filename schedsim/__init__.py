"""
CPU scheduling simulation engine.

Simulates FCFS, SJF, SRTF, Priority (both variants) and Round Robin over a
workload, producing an exact execution timeline with context-switch overhead
and the derived per-process and aggregate performance metrics.
"""

from .algorithms import CONTEXT_SWITCH_TIME, DEFAULT_QUANTUM, compare, simulate
from .models import IDLE, AlgorithmResult, Policy, Process, ProcessMetrics, TimelineSlice
from .registry import InvalidWorkloadError

__all__ = [
    "CONTEXT_SWITCH_TIME",
    "DEFAULT_QUANTUM",
    "IDLE",
    "AlgorithmResult",
    "InvalidWorkloadError",
    "Policy",
    "Process",
    "ProcessMetrics",
    "TimelineSlice",
    "compare",
    "simulate",
]
