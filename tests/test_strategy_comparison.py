"""
Strategy Comparison Tests

Tests evaluate_strategies, the comparison report and graph statistics.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.detection import detect
from algorithms.recovery import StrategyKind
from analysis.analyzer import evaluate_strategies, generate_strategy_report
from analysis.metrics import GraphStatistics, format_statistics_report
from models.graph import ResourceGraph


def test_evaluate_strategies_on_deadlock(scenario_a):
    """Every strategy is evaluated on its own copy."""
    print("\n" + "="*60)
    print("TEST: Strategy comparison")
    print("="*60)

    outcomes = evaluate_strategies(scenario_a)
    report = generate_strategy_report(outcomes)
    print(report)

    by_kind = {o.kind: o for o in outcomes}
    assert set(by_kind) == {
        StrategyKind.PREEMPTION, StrategyKind.TERMINATION, StrategyKind.AUGMENTATION
    }

    assert by_kind[StrategyKind.PREEMPTION].resolved
    assert by_kind[StrategyKind.PREEMPTION].safe_sequence_after == ["P2", "P1"]
    assert by_kind[StrategyKind.TERMINATION].resolved
    assert by_kind[StrategyKind.TERMINATION].processes_after == 1
    assert not by_kind[StrategyKind.AUGMENTATION].resolved
    assert by_kind[StrategyKind.AUGMENTATION].cycle_after == ["P1", "P2"]

    assert detect(scenario_a).deadlock, "Input graph must not change"
    assert "Strategies that resolve the deadlock: Resource Preemption, Process Termination" in report
    assert "deadlock REMAINS (cycle: P1 -> P2 -> P1)" in report
    print("  ✓ Outcomes compared")


def test_evaluate_strategies_on_safe_graph(scenario_b):
    outcomes = evaluate_strategies(scenario_b)

    assert outcomes == []
    assert "no prevention needed" in generate_strategy_report(outcomes)


def test_graph_statistics(scenario_a):
    stats = GraphStatistics.from_graph(scenario_a)

    assert stats.process_count == 2
    assert stats.resource_count == 2
    assert stats.edge_count == 4
    assert (stats.request_edges, stats.allocation_edges) == (2, 2)
    assert stats.blocked_processes == 2
    assert stats.wait_for_edges == 2
    assert (stats.total_instances, stats.available_instances) == (2, 0)
    assert stats.resource_utilization == {"R1": 100.0, "R2": 100.0}
    assert stats.get_avg_utilization() == 100.0

    report = format_statistics_report(stats, verbose=True)
    assert "Instances in use: 2/2 (100.00%)" in report
    assert "R1: 100.00%" in report


def test_statistics_of_empty_graph():
    stats = GraphStatistics.from_graph(ResourceGraph.empty())

    assert stats.total_instances == 0
    assert stats.get_avg_utilization() == 0.0
    assert stats.resource_utilization == {}
