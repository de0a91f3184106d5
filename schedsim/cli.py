from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import List

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .algorithms import CONTEXT_SWITCH_TIME, DEFAULT_QUANTUM, compare, simulate
from .gantt import build_rich_gantt, render_gantt
from .models import IDLE, AlgorithmResult, Policy, Process
from .timeline import TICK, TICKS_PER_UNIT
from .workload_io import SAMPLE_WORKLOAD, dump_results, load_workload

logger = logging.getLogger(__name__)

POLICY_NAMES = [p.value for p in Policy]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedsim",
        description="CPU scheduling simulator (FCFS, SJF, SRTF, Priority, preemptive Priority, RR).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every dispatch, context switch and completion.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one scheduling policy on a workload.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Policy to use ({', '.join(POLICY_NAMES)}).",
    )
    _add_workload_args(run_parser)
    run_parser.add_argument(
        "--step",
        action="store_true",
        help="Play the schedule back tick by tick in the terminal.",
    )
    run_parser.add_argument(
        "--step-delay",
        type=float,
        default=0.1,
        help="Seconds to wait between ticks when --step is used (default: 0.1).",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Print a plain-text Gantt chart instead of the coloured one.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run several policies on the same workload and compare aggregate metrics.",
    )
    _add_workload_args(compare_parser)
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=POLICY_NAMES,
        help=f"Policies to compare (default: {' '.join(POLICY_NAMES)}).",
    )

    return parser


def _add_workload_args(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--workload",
        "-w",
        help="Path to JSON or CSV workload file.",
    )
    source.add_argument(
        "--sample",
        action="store_true",
        help="Use the built-in four-process demo workload.",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=float,
        default=DEFAULT_QUANTUM,
        help=f"Time quantum for Round Robin (default: {DEFAULT_QUANTUM}).",
    )
    parser.add_argument(
        "--switch-cost",
        type=float,
        default=CONTEXT_SWITCH_TIME,
        help=f"Context-switch overhead in time units (default: {CONTEXT_SWITCH_TIME}).",
    )
    parser.add_argument(
        "--json",
        dest="json_out",
        default=None,
        help="Also write the result(s) to this JSON file.",
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load(args: argparse.Namespace) -> List[Process]:
    if args.sample:
        return list(SAMPLE_WORKLOAD)
    return load_workload(Path(args.workload))


def _fmt(value: float) -> str:
    return f"{value:g}"


def _print_result(result: AlgorithmResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.policy.label}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {_fmt(result.quantum)}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline, result.processes)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = [
        "PID",
        "Arrive",
        "Burst",
        "Priority",
        "Start",
        "Complete",
        "Wait",
        "Turnaround",
        "Response",
    ]

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        proc_table.add_row(
            p.pid,
            _fmt(p.arrival_time),
            _fmt(p.burst_time),
            str(p.priority),
            _fmt(p.start_time),
            _fmt(p.completion_time),
            _fmt(p.waiting_time),
            _fmt(p.turnaround_time),
            _fmt(p.response_time),
        )

    console.print(proc_table)
    console.print()

    sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")

    sys_table.add_row("Avg waiting", f"{result.avg_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.avg_turnaround_time:.2f}")
    sys_table.add_row("Avg response", f"{result.avg_response_time:.2f}")
    sys_table.add_row("Throughput (proc/time)", f"{result.throughput:.3f}")
    sys_table.add_row("CPU utilization", f"{result.cpu_utilization:.2f}%")
    sys_table.add_row("Context switches", str(result.context_switches))
    sys_table.add_row("Total time", _fmt(result.total_time))

    console.print(sys_table)


def _print_comparison(results: List[AlgorithmResult], console: Console) -> None:
    summary_table = Table(title="Algorithm comparison", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("CPU util.", justify="right")
    summary_table.add_column("Switches", justify="right")

    for result in results:
        summary_table.add_row(
            result.policy.label,
            "" if result.quantum is None else _fmt(result.quantum),
            f"{result.avg_waiting_time:.2f}",
            f"{result.avg_turnaround_time:.2f}",
            f"{result.avg_response_time:.2f}",
            f"{result.cpu_utilization:.2f}%",
            str(result.context_switches),
        )

    console.print(summary_table)


def _animate_result(result: AlgorithmResult, delay: float, console: Console) -> None:
    """
    Step through the finished schedule one tick at a time.
    """
    if not result.timeline:
        console.print("[red]No execution to animate.[/red]")
        return

    console.print(f"[bold]Simulating {result.policy.label}[/bold] (duration {_fmt(result.total_time)} time units)")
    console.print("[dim]Press Ctrl+C to skip animation.[/dim]")

    total_ticks = round(result.total_time * TICKS_PER_UNIT)
    for tick in range(total_ticks):
        t = round(tick * TICK, 1)
        running = result.running_at(t)
        waiting = ", ".join(p.pid for p in result.waiting_at(t)) or "-"
        label = "[dim]idle[/dim]" if running == IDLE else f"[green]{running}[/green]"
        console.print(f"t={t:5.1f}: {label}  ready: {waiting}")
        time.sleep(delay)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    console = Console()

    try:
        processes = _load(args)

        if args.command == "run":
            result = simulate(
                args.algorithm,
                processes,
                quantum=args.quantum,
                context_switch_cost=args.switch_cost,
            )
            if args.step:
                try:
                    _animate_result(result, args.step_delay, console)
                except KeyboardInterrupt:
                    console.print("[yellow]Animation skipped.[/yellow]")
            _print_result(result, console, plain=args.plain)
            results = [result]
        elif args.command == "compare":
            results = compare(
                args.algorithms,
                processes,
                quantum=args.quantum,
                context_switch_cost=args.switch_cost,
            )
            _print_comparison(results, console)
        else:
            parser.error(f"Unknown command: {args.command}")
            return 1
    except (OSError, ValueError) as exc:
        logger.debug("run aborted", exc_info=True)
        console.print(f"[red]Error: {escape(str(exc))}[/red]")
        return 2

    if args.json_out:
        path = dump_results(results, args.json_out)
        console.print(f"[dim]Wrote {path}[/dim]")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
