import pytest

from schedsim.algorithms import RUNNERS, compare, simulate
from schedsim.models import IDLE, Policy, Process


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _pair():
    return [
        Process("P1", arrival_time=0, burst_time=4),
        Process("P2", arrival_time=1, burst_time=2),
    ]


def _spans(result):
    return [(s.pid, s.start_time, s.end_time) for s in result.timeline]


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def test_every_policy_has_a_runner():
    assert set(RUNNERS) == set(Policy)


def test_fcfs_scenario_without_switch_cost():
    res = simulate(Policy.FCFS, _pair(), context_switch_cost=0)
    assert _spans(res) == [("P1", 0, 4), ("P2", 4, 6)]
    m = _by_pid(res)
    assert m["P1"].waiting_time == 0
    assert m["P2"].waiting_time == 3
    assert res.context_switches == 1
    assert res.total_time == 6


def test_fcfs_scenario_with_default_switch_cost():
    res = simulate(Policy.FCFS, _pair())
    assert _spans(res) == [("P1", 0, 4), ("P2", 4.1, 6.1)]
    m = _by_pid(res)
    assert m["P2"].waiting_time == 3.1
    assert m["P2"].response_time == 3.1
    assert m["P2"].completion_time == 6.1
    assert res.context_switches == 1
    assert res.total_time == 6.1
    assert res.cpu_utilization == 98.36
    assert res.throughput == 0.328


def test_sjf_is_non_preemptive():
    res = simulate(Policy.SJF, _pair(), context_switch_cost=0)
    # P2 is shorter but arrives while P1 already holds the CPU.
    assert _spans(res) == [("P1", 0, 4), ("P2", 4, 6)]


def test_srtf_preempts_for_shorter_arrival():
    res = simulate(Policy.SRTF, _pair(), context_switch_cost=0)
    assert _spans(res) == [("P1", 0, 1), ("P2", 1, 3), ("P1", 3, 6)]
    m = _by_pid(res)
    assert m["P1"].waiting_time == 2
    assert m["P2"].waiting_time == 0
    assert m["P1"].completion_time == 6
    assert res.context_switches == 2


def test_srtf_with_default_switch_cost():
    res = simulate(Policy.SRTF, _pair())
    assert _spans(res) == [("P1", 0, 1), ("P2", 1.1, 3.1), ("P1", 3.2, 6.2)]
    assert res.context_switches == 2
    assert res.total_time == 6.2


def test_rr_arrivals_queue_before_preempted_process():
    res = simulate(Policy.RR, _pair(), quantum=2, context_switch_cost=0)
    assert _spans(res) == [("P1", 0, 2), ("P2", 2, 4), ("P1", 4, 6)]
    assert res.quantum == 2

    res = simulate(Policy.RR, _pair(), quantum=2)
    assert _spans(res) == [("P1", 0, 2), ("P2", 2.1, 4.1), ("P1", 4.2, 6.2)]
    assert res.context_switches == 2


def test_rr_quantum_2_full_cycle():
    res = simulate(Policy.RR, _procs(), quantum=2, context_switch_cost=0)
    assert _spans(res) == [
        ("P1", 0, 2),
        ("P2", 2, 4),
        ("P3", 4, 6),
        ("P1", 6, 8),
        ("P2", 8, 9),
        ("P3", 9, 11),
        ("P1", 11, 12),
        ("P3", 12, 16),
    ]
    m = _by_pid(res)
    assert (m["P1"].completion_time, m["P2"].completion_time, m["P3"].completion_time) == (12, 9, 16)
    assert res.context_switches == 7


def test_fcfs_order():
    res = simulate(Policy.FCFS, _procs(), context_switch_cost=0)
    assert [s.pid for s in res.timeline] == ["P1", "P2", "P3"]
    m = _by_pid(res)
    assert m["P1"].waiting_time == 0
    assert m["P2"].waiting_time == 4
    assert m["P3"].waiting_time == 6


def test_sjf_order():
    res = simulate(Policy.SJF, _procs(), context_switch_cost=0)
    assert [s.pid for s in res.timeline] == ["P1", "P2", "P3"]


def test_priority_static():
    res = simulate(Policy.PRIORITY, _procs(), context_switch_cost=0)
    # P1 is alone at t=0 and keeps the CPU; P2 beats P3 afterwards.
    assert _spans(res) == [("P1", 0, 5), ("P2", 5, 8), ("P3", 8, 16)]


def test_priority_preemptive():
    res = simulate(Policy.PRIORITY_PREEMPTIVE, _procs(), context_switch_cost=0)
    assert _spans(res) == [("P1", 0, 1), ("P2", 1, 4), ("P1", 4, 8), ("P3", 8, 16)]
    m = _by_pid(res)
    assert m["P1"].waiting_time == 3
    assert m["P2"].response_time == 0
    assert m["P3"].response_time == 6


def test_srtf_never_lets_shorter_arrival_wait():
    res = simulate(Policy.SRTF, _procs(), context_switch_cost=0)
    assert _spans(res) == [("P1", 0, 1), ("P2", 1, 4), ("P1", 4, 8), ("P3", 8, 16)]
    assert _by_pid(res)["P2"].response_time == 0


@pytest.mark.parametrize(
    "policy, attr",
    [(Policy.SJF, "burst_time"), (Policy.PRIORITY, "priority")],
)
def test_ties_go_to_earlier_arrival(policy, attr):
    procs = [
        Process("X", arrival_time=0, burst_time=4, priority=1),
        Process("Y", arrival_time=2, burst_time=3, priority=5),
        Process("Z", arrival_time=1, burst_time=3, priority=5),
    ]
    assert getattr(procs[1], attr) == getattr(procs[2], attr)
    res = simulate(policy, procs, context_switch_cost=0)
    assert _spans(res) == [("X", 0, 4), ("Z", 4, 7), ("Y", 7, 10)]


def test_srtf_tie_keeps_earlier_arrival_running():
    procs = [
        Process("A", arrival_time=0, burst_time=3),
        Process("B", arrival_time=1, burst_time=2),
    ]
    # At t=1 both have 2 units left; A arrived first and keeps the CPU.
    res = simulate(Policy.SRTF, procs, context_switch_cost=0)
    assert _spans(res) == [("A", 0, 3), ("B", 3, 5)]


def test_idle_gap_is_recorded_and_resets_switch_baseline():
    procs = [
        Process("P1", arrival_time=0, burst_time=2),
        Process("P2", arrival_time=5, burst_time=1),
    ]
    for policy in Policy:
        res = simulate(policy, procs)
        assert _spans(res) == [("P1", 0, 2), (IDLE, 2, 5), ("P2", 5, 6)], policy
        assert res.context_switches == 0
        assert res.cpu_utilization == 50.0
        assert res.throughput == 0.333


def test_late_first_arrival_starts_with_idle():
    procs = [Process("P1", arrival_time=3, burst_time=1)]
    res = simulate(Policy.RR, procs, quantum=1)
    assert _spans(res) == [(IDLE, 0, 3), ("P1", 3, 4)]
    assert _by_pid(res)["P1"].response_time == 0


def test_empty_workload_gives_zero_result():
    for policy in Policy:
        res = simulate(policy, [])
        assert res.policy is policy
        assert res.timeline == []
        assert res.processes == []
        assert res.avg_waiting_time == 0
        assert res.avg_turnaround_time == 0
        assert res.cpu_utilization == 0
        assert res.throughput == 0
        assert res.context_switches == 0
        assert res.total_time == 0


def test_metrics_follow_input_order():
    procs = list(reversed(_procs()))
    res = simulate(Policy.FCFS, procs)
    assert [p.pid for p in res.processes] == ["P3", "P2", "P1"]
    assert [p.pid for p in procs] == ["P3", "P2", "P1"]


def test_fcfs_is_independent_of_input_order():
    a = simulate(Policy.FCFS, _procs())
    b = simulate(Policy.FCFS, list(reversed(_procs())))
    assert _spans(a) == _spans(b)
    assert a.avg_waiting_time == b.avg_waiting_time


def test_policy_names_are_accepted():
    res = simulate("round-robin", _pair(), quantum=2, context_switch_cost=0)
    assert res.policy is Policy.RR
    assert simulate("srjf", _pair()).policy is Policy.SRTF


def test_quantum_is_ignored_outside_rr():
    res = simulate(Policy.FCFS, _pair(), quantum=0)
    assert res.quantum is None


def test_compare_keeps_requested_order():
    policies = [Policy.RR, "fcfs", Policy.SRTF]
    results = compare(policies, _procs(), quantum=2)
    assert [r.policy for r in results] == [Policy.RR, Policy.FCFS, Policy.SRTF]
    assert results[1] == simulate(Policy.FCFS, _procs())
