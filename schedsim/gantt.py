from __future__ import annotations

from typing import Dict, List, Optional

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import ProcessMetrics, TimelineSlice

PALETTE = ["red", "green", "yellow", "blue", "magenta", "cyan"]


def _width(sl: TimelineSlice, scale: int) -> int:
    return max(1, round((sl.end_time - sl.start_time) * scale))


def render_gantt(slices: List[TimelineSlice], scale: int = 2) -> str:
    """
    Plain-text Gantt chart, ``scale`` characters per time unit.
    """
    if not slices:
        return "(no execution)"

    bar = "|"
    labels = " "
    for sl in slices:
        width = _width(sl, scale)
        bar += ("." if sl.is_idle else "=") * width
        labels += sl.pid[:width].ljust(width)
    bar += "|"

    marks = " ".join(f"{sl.end_time:g}" for sl in slices)
    return "\n".join(["Gantt Chart:", bar, labels, f"0 {marks}"])


def build_rich_gantt(
    slices: List[TimelineSlice],
    processes: Optional[List[ProcessMetrics]] = None,
    scale: int = 2,
) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.

    Colors come from the process ``color`` attribute when set, otherwise from a
    fixed palette in order of first appearance.
    """
    if not slices:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    pid_to_color: Dict[str, str] = {p.pid: p.color for p in processes or [] if p.color}
    assigned = 0

    def pid_color(pid: str) -> str:
        nonlocal assigned
        if pid not in pid_to_color:
            pid_to_color[pid] = PALETTE[assigned % len(PALETTE)]
            assigned += 1
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = "0"

    for sl in slices:
        width = _width(sl, scale)
        if sl.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(" " * width)
        else:
            timeline.append(" " * width, style=f"on {pid_color(sl.pid)}")
            labels.append(sl.pid[:width].ljust(width), style="bold")
        time_marks += f" {sl.end_time:g}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
