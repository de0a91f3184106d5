from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterable, List, Sequence

from .models import AlgorithmResult, Process

# Demo workload used by ``--sample``.
SAMPLE_WORKLOAD: List[Process] = [
    Process("P1", arrival_time=0, burst_time=4, priority=2),
    Process("P2", arrival_time=1, burst_time=2, priority=1),
    Process("P3", arrival_time=2, burst_time=6, priority=3),
    Process("P4", arrival_time=4, burst_time=3, priority=4),
]


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return [_process_from_mapping(row) for row in reader]


def _number(value) -> float:
    num = float(value)
    return int(num) if num.is_integer() else num


def _process_from_mapping(mapping) -> Process:
    try:
        pid = str(mapping["pid"] if "pid" in mapping else mapping["id"])
        arrival_time = _number(mapping["arrival_time"])
        burst_time = _number(mapping["burst_time"])
        priority_val = mapping.get("priority")
        priority = int(priority_val) if priority_val not in (None, "") else 0
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    color = mapping.get("color") or None

    return Process(
        pid=pid,
        arrival_time=arrival_time,
        burst_time=burst_time,
        priority=priority,
        color=color,
    )


def dump_results(results: Sequence[AlgorithmResult], path: str | Path) -> Path:
    """
    Write simulation results to ``path`` as a JSON list.
    """
    path = Path(path)
    path.write_text(results_to_json(results), encoding="utf-8")
    return path


def results_to_json(results: Iterable[AlgorithmResult]) -> str:
    return json.dumps([r.to_dict() for r in results], indent=2)
