from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import List, Optional

IDLE = "IDLE"


class Policy(str, Enum):
    FCFS = "fcfs"
    SJF = "sjf"
    SRTF = "srtf"
    PRIORITY = "priority"
    PRIORITY_PREEMPTIVE = "priority-preemptive"
    RR = "rr"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def preemptive(self) -> bool:
        return self in (Policy.SRTF, Policy.PRIORITY_PREEMPTIVE, Policy.RR)

    @property
    def uses_quantum(self) -> bool:
        return self is Policy.RR

    @classmethod
    def parse(cls, name: str | Policy) -> Policy:
        """
        Resolve a policy from its value, member name or a common alias.
        """
        if isinstance(name, Policy):
            return name
        key = str(name).strip().lower().replace("_", "-")
        key = _ALIASES.get(key, key)
        for policy in cls:
            if key == policy.value:
                return policy
        raise ValueError(f"Unknown scheduling policy '{name}'")


_LABELS = {
    Policy.FCFS: "First Come First Serve (FCFS)",
    Policy.SJF: "Shortest Job First (SJF)",
    Policy.SRTF: "Shortest Remaining Time First (SRTF)",
    Policy.PRIORITY: "Priority (non-preemptive)",
    Policy.PRIORITY_PREEMPTIVE: "Priority (preemptive)",
    Policy.RR: "Round Robin",
}

_ALIASES = {
    "srjf": "srtf",
    "prio": "priority",
    "priority-np": "priority",
    "ppri": "priority-preemptive",
    "prio-p": "priority-preemptive",
    "round-robin": "rr",
}


@dataclass(frozen=True)
class Process:
    pid: str
    arrival_time: float
    burst_time: float
    priority: int = 0  # lower value = higher priority
    color: Optional[str] = None


@dataclass
class TimelineSlice:
    """
    One contiguous interval of CPU occupancy (or idleness) in the Gantt chart.
    """

    pid: str
    start_time: float
    end_time: float

    @property
    def duration(self) -> float:
        return round(self.end_time - self.start_time, 1)

    @property
    def is_idle(self) -> bool:
        return self.pid == IDLE


@dataclass
class ProcessMetrics:
    pid: str
    arrival_time: float
    burst_time: float
    priority: int
    start_time: float
    completion_time: float
    turnaround_time: float
    waiting_time: float
    response_time: float
    color: Optional[str] = None


@dataclass
class AlgorithmResult:
    policy: Policy
    quantum: Optional[float]
    timeline: List[TimelineSlice] = field(default_factory=list)
    processes: List[ProcessMetrics] = field(default_factory=list)
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    avg_response_time: float = 0.0
    cpu_utilization: float = 0.0
    throughput: float = 0.0
    context_switches: int = 0
    total_time: float = 0.0

    def running_at(self, t: float) -> str:
        """
        Return the pid occupying the CPU at time ``t`` (``IDLE`` if none).

        Context-switch overhead has no slice, so instants inside an overhead
        window also report ``IDLE``.
        """
        for sl in self.timeline:
            if sl.start_time <= t < sl.end_time:
                return sl.pid
        return IDLE

    def waiting_at(self, t: float) -> List[ProcessMetrics]:
        running = self.running_at(t)
        return [
            p
            for p in self.processes
            if p.arrival_time <= t and p.completion_time > t and p.pid != running
        ]

    def to_dict(self) -> dict:
        data = asdict(self)
        data["policy"] = self.policy.value
        data["label"] = self.policy.label
        return data
